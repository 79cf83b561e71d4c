import logging
from typing import Iterable, List

import boto3

from ..util import make_logical_name, ref
from ..validation import TemplateError, alias_target, dns_record_type, health_check_id, \
    health_check_type, validate

logger = logging.getLogger(__name__)


def route53_client(region: str):
    if not region:
        raise ValueError("unable to proceed without region")
    return boto3.client("route53", region_name=region)


def _app_name(app_name: str, stack_name: str) -> str:
    if app_name:
        return app_name
    return make_logical_name(stack_name)


def create_healthcheck(template, app_name: str, stack_name: str, protocol: str = "HTTP",
                       ip_address: str = None, port: int = 80, resource_path: str = "/", fqdn: str = None,
                       request_interval: int = 30, failure_threshold: int = 3, tags: List[dict] = None) -> dict:
    app_name = _app_name(app_name, stack_name)
    where = f"health check for '{app_name}'"

    validate(protocol, health_check_type, where)
    if not (ip_address or fqdn):
        raise TemplateError("either ip_address or fqdn is required", where=where)

    config = {
        "Type": protocol,
        "Port": port,
        "RequestInterval": request_interval,
        "FailureThreshold": failure_threshold,
    }
    if protocol != "TCP":
        config["ResourcePath"] = resource_path
    if ip_address:
        config["IPAddress"] = ip_address
    if fqdn:
        config["FullyQualifiedDomainName"] = fqdn

    health_check_tags = [
        {"Key": "Application", "Value": app_name},
        {"Key": "Stack", "Value": stack_name},
    ]
    health_check_tags.extend(tags or [])

    ret = template.resource(f"{app_name}Healthcheck", {
        "Type": "AWS::Route53::HealthCheck",
        "Properties": {
            "HealthCheckConfig": config,
            "HealthCheckTags": health_check_tags,
        },
    })
    return ret


def create_single_dns_record(template, app_name: str, stack_name: str, zone_name: str, record_name: str,
                             ttl: int = 300, type: str = "A", healthcheck=None, alias_target_spec: dict = None,
                             resource_records: list = None) -> dict:
    """
    Declares one Route53 record set called <app_name>Hostname. When app_name is not given
    a name is derived from stack_name.

    Records default to the public ip of the application's instance. An alias target
    replaces ttl and resource records.
    """
    app_name = _app_name(app_name, stack_name)
    where = f"dns record for '{app_name}'"

    validate(type, dns_record_type, where)

    properties = {
        "Name": record_name,
        "HostedZoneName": zone_name,
        "Type": type,
    }

    if healthcheck is not None:
        properties["HealthCheckId"] = validate(healthcheck, health_check_id, where)

    if alias_target_spec is not None:
        properties["AliasTarget"] = validate(alias_target_spec, alias_target, where)
    else:
        properties["TTL"] = ttl
        properties["ResourceRecords"] = resource_records or [ref(f"{app_name}PublicIpAddress")]

    ret = template.resource(f"{app_name}Hostname", {
        "Type": "AWS::Route53::RecordSet",
        "Properties": properties,
    })
    return ret


def create_hosted_zone(template, *args, **kwargs):
    raise NotImplementedError("hosted zone templates are not supported yet")


def create_multiple_dns_records(template, *args, **kwargs):
    raise NotImplementedError("record set groups are not supported yet")


def upsert_dns_record(zone_name: str, record_name: str, type: str, values: Iterable[str],
                      ttl: int = 300, region: str = "us-east-1") -> dict:
    """
    Creates or replaces a record set directly through the route53 api, e.g. from a post-run
    hook once the stack's endpoints are known.
    """
    validate(type, dns_record_type, f"dns record '{record_name}'")
    client = route53_client(region)

    zone_name = zone_name if zone_name.endswith(".") else zone_name + "."
    response = client.list_hosted_zones_by_name(DNSName=zone_name)
    zone_id = next((z["Id"] for z in response.get("HostedZones", []) if z.get("Name") == zone_name), None)
    if zone_id is None:
        raise TemplateError(f"hosted zone {zone_name} not found")

    logger.info(f"upserting {type} record {record_name} in {zone_name}")
    ret = client.change_resource_record_sets(
        HostedZoneId=zone_id,
        ChangeBatch={
            "Changes": [
                {
                    "Action": "UPSERT",
                    "ResourceRecordSet": {
                        "Name": record_name,
                        "Type": type,
                        "TTL": ttl,
                        "ResourceRecords": [{"Value": v} for v in values],
                    },
                },
            ],
        },
    )
    return ret
