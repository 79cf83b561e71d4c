"""
Standalone MySQL instance in the private subnets of an existing vpc stack.
"""
import logging

from ..plugins.rds import rds_init
from ..plugins.route53 import upsert_dns_record
from ..stack import cfn_resource, get_resource, get_resources, wait_stack
from ..validation import TemplateError

logger = logging.getLogger(__name__)

DB_NAME = "Standalone"

SUBNET_KEYS = ["PrivateSubnet1", "PrivateSubnet2"]
SECURITY_GROUP_KEYS = ["PrivateSecurityGroup"]


def build(tpl) -> None:
    tpl.description("RDS stack with a standalone MySQL instance")

    max_time = tpl.options["timeout"]
    vpc_stack = wait_stack(cfn_resource(tpl.region), tpl.vpc_stack_name, max_time=max_time)

    subnets = get_resources(vpc_stack, SUBNET_KEYS)
    security_groups = get_resources(vpc_stack, SECURITY_GROUP_KEYS)

    rds_init(tpl, DB_NAME, subnets, security_groups)

    @tpl.pre_run
    def check_vpc_resources(t):
        if len(subnets) != len(SUBNET_KEYS) or len(security_groups) != len(SECURITY_GROUP_KEYS):
            raise TemplateError(f"vpc stack {t.vpc_stack_name} is missing some of "
                                f"{', '.join(SUBNET_KEYS + SECURITY_GROUP_KEYS)}")

    @tpl.post_run
    def register_endpoint(t):
        if not t.options["hosted_zone"]:
            logger.info("no hosted zone configured, skipping dns registration")
            return

        stack = wait_stack(cfn_resource(t.region), t.stack_name, max_time=max_time)
        endpoint = get_resource(stack, f"{DB_NAME}EndpointAddress")
        if endpoint is None:
            raise TemplateError(f"stack {t.stack_name} has no endpoint address, status {stack.stack_status}")

        upsert_dns_record(t.hosted_zone, f"{t.stack_name}-db.{t.hosted_zone}", "CNAME", [endpoint])
