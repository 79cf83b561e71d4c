import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Union

import humanfriendly

from . import parameters as params
from . import resources as rc
from .ec2 import ec2_client, get_availability_zones
from .util import Parameter, Resource, get_att, parse_parameters, ref
from .validation import TemplateError, validate_options, validate_parameter

logger = logging.getLogger(__name__)

# cloudformation limit when sending the template body directly
TEMPLATE_BODY_LIMIT = 51200

SECTIONS = ("Parameters", "Mappings", "Resources", "Outputs")

Hook = Callable[["Template"], None]


class Template(object):
    """
    Owns one cloudformation template document and the command line options it was built
    with. Parameters, resources, outputs and mappings are added through the methods below;
    names are unique within each section, redeclaring a name replaces the earlier entry.
    """
    def __init__(self, options: dict = None):
        self.options = validate_options(dict(options or {}))
        self.doc = {"AWSTemplateFormatVersion": "2010-09-09"}
        for section in SECTIONS:
            self.doc[section] = {}

        try:
            self.bound_parameters = parse_parameters(self.options["parameters"])
        except ValueError as ve:
            raise TemplateError(str(ve), where="options", field="parameters")

        self.declared_parameters = set()
        self.pre_run_hooks: List[Hook] = []
        self.post_run_hooks: List[Hook] = []
        self._availability_zones = None

    # option accessors

    @property
    def region(self) -> str:
        if not self.options["region"]:
            raise TemplateError("region is required", where="options")
        return self.options["region"]

    @property
    def stack_name(self) -> str:
        return self.options["stack_name"]

    @property
    def vpc_stack_name(self) -> str:
        if not self.options["vpc_stack_name"]:
            raise TemplateError("requires vpc-stack-name", where="options")
        return self.options["vpc_stack_name"]

    @property
    def parameters(self) -> Dict[str, str]:
        return parse_parameters(self.options["parameters"])

    @property
    def hosted_zone(self) -> str:
        zone = self.options["hosted_zone"]
        if not zone:
            raise TemplateError("hosted zone has to be configured", where="options")
        return zone if zone.endswith(".") else zone + "."

    @property
    def availability_zones(self) -> Dict[str, str]:
        if self._availability_zones is None:
            self._availability_zones = get_availability_zones(ec2_client(self.region),
                                                              self.options["availability_zone"])
        return self._availability_zones

    # hooks

    def pre_run(self, hook: Hook) -> Hook:
        self.pre_run_hooks.append(hook)
        return hook

    def post_run(self, hook: Hook) -> Hook:
        self.post_run_hooks.append(hook)
        return hook

    # document sections

    def description(self, desc: str) -> None:
        self.doc["Description"] = desc

    def parameter(self, name: str, spec: dict) -> dict:
        normalized = validate_parameter(name, spec)
        self.doc["Parameters"][name] = normalized
        self.declared_parameters.add(name)
        self.bound_parameters.setdefault(name, normalized.get("Default"))
        return ref(name)

    def param_ref(self, name: str) -> dict:
        if name not in self.declared_parameters:
            raise TemplateError(f"parameter '{name}' has not been declared")
        return ref(name)

    def parameter_value(self, name: str) -> Any:
        return self.bound_parameters.get(name)

    def resource(self, name: str, spec: dict) -> dict:
        rc.check_network_attachment(name, spec)
        self.doc["Resources"][name] = spec

        if spec.get("Type") == rc.INSTANCE_TYPE:
            self.output(f"{name}PrivateIpAddress", f"{name} Private IP Address", get_att(name, "PrivateIp"))

        return ref(name)

    def output(self, name: str, description: str, value: Any) -> None:
        self.doc["Outputs"][name] = {
            "Description": description,
            "Value": value,
        }

    def mapping(self, name: str, body: dict) -> None:
        self.doc["Mappings"][name] = body

    def add(self, item: Union[Parameter, Resource]) -> dict:
        if isinstance(item, Parameter):
            return self.parameter(*item)
        return self.resource(*item)

    # resource helpers

    def vpc(self, name: str, cidr: str, **kwargs) -> dict:
        return self.add(rc.vpc_rc(name, cidr, **kwargs))

    def subnet(self, name: str, vpc, cidr: str, **kwargs) -> dict:
        return self.add(rc.subnet_rc(name, vpc, cidr, **kwargs))

    def security_group(self, name: str, description: str, **kwargs) -> dict:
        return self.add(rc.security_group_rc(name, description, **kwargs))

    def security_group_vpc(self, name: str, description: str, vpc, **kwargs) -> dict:
        return self.add(rc.security_group_rc(name, description, vpc=vpc, **kwargs))

    @staticmethod
    def network_interface(device_index, **properties) -> dict:
        return rc.network_interface(device_index, **properties)

    def instance_vpc(self, name: str, image_id, subnet, security_groups: list, **kwargs) -> dict:
        return self.add(rc.instance_vpc_rc(name, image_id, subnet, security_groups, **kwargs))

    def instance_with_network(self, name: str, image_id, network_interfaces: List[dict], **kwargs) -> dict:
        return self.add(rc.instance_with_network_rc(name, image_id, network_interfaces, **kwargs))

    def iam_instance_profile_with_full_access(self, role_name: str, *services: str) -> dict:
        ret = None
        for resource in rc.iam_full_access_rcs(role_name, *services):
            ret = self.add(resource)
        # the profile comes last
        return ret

    # parameter helpers

    def parameter_key_name(self, instance_name: str) -> dict:
        return self.add(params.key_name_parameter(instance_name))

    def parameter_name(self, instance_name: str, **kwargs) -> dict:
        return self.add(params.name_parameter(instance_name, **kwargs))

    def parameter_username(self, instance_name: str, **kwargs) -> dict:
        return self.add(params.username_parameter(instance_name, **kwargs))

    def parameter_password(self, instance_name: str, **kwargs) -> dict:
        return self.add(params.password_parameter(instance_name, **kwargs))

    def parameter_allocated_storage(self, instance_name: str, **kwargs) -> dict:
        return self.add(params.allocated_storage_parameter(instance_name, **kwargs))

    def parameter_instance_type(self, instance_name: str, instance_type: str, allowed_values: Iterable[str],
                                **kwargs) -> dict:
        return self.add(params.instance_type_parameter(instance_name, instance_type, list(allowed_values),
                                                       **kwargs))

    def parameter_ec2_instance_type(self, instance_name: str, instance_type: str = None) -> dict:
        return self.add(params.ec2_instance_type_parameter(instance_name, instance_type))

    def parameter_rds_instance_type(self, instance_name: str, instance_type: str = None) -> dict:
        return self.add(params.rds_instance_type_parameter(instance_name, instance_type))

    # serialization

    def to_dict(self) -> dict:
        ret = {k: v for k, v in self.doc.items() if not (k in SECTIONS and not v)}
        return ret

    def to_json(self, indent: int = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def template_body(self) -> str:
        ret = self.to_json()
        size = len(ret.encode("utf-8"))
        if size >= TEMPLATE_BODY_LIMIT:
            raise TemplateError(f"unable to deploy template exceeding "
                                f"{humanfriendly.format_size(TEMPLATE_BODY_LIMIT, binary=True)} limit: "
                                f"{humanfriendly.format_size(size, binary=True)} ({size} bytes)")
        logger.debug(f"template body is {size} bytes")
        return ret

    def stack_parameters(self) -> List[dict]:
        ret = [{"ParameterKey": k, "ParameterValue": str(v)}
               for k, v in self.bound_parameters.items() if v is not None]
        return ret
