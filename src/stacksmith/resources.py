from typing import Generator, Iterable, List

from .util import Resource, STACK_NAME, has_tag, join, ref, tags_to_properties
from .validation import TemplateError

INSTANCE_TYPE = "AWS::EC2::Instance"

VPC_ATTACHMENT = ("SubnetId", "SecurityGroups", "SecurityGroupIds")


def default_name_tag(name: str) -> dict:
    return join("-", STACK_NAME, name)


def _tags(name: str, tags: dict) -> List[dict]:
    tags = dict(tags or {})
    if "Name" not in tags:
        tags["Name"] = default_name_tag(name)
    return tags_to_properties(tags)


def _tagged_properties(name: str, properties: dict) -> dict:
    ret = dict(properties)
    tags = list(ret.get("Tags", []))
    if not has_tag(tags, "Name"):
        tags.append({"Key": "Name", "Value": default_name_tag(name)})
    ret["Tags"] = tags
    return ret


def _resource(name: str, rc_type: str, properties: dict, depends_on: Iterable[str] = ()) -> Resource:
    spec = {
        "Type": rc_type,
        "Properties": properties,
    }
    if depends_on:
        spec["DependsOn"] = list(depends_on)
    return Resource(name, spec)


def vpc_rc(name: str, cidr: str, enable_dns_support: bool = None, enable_dns_hostnames: bool = None,
           depends_on: Iterable[str] = (), tags: dict = None) -> Resource:
    properties = {
        "CidrBlock": cidr,
    }
    if enable_dns_support is not None:
        properties["EnableDnsSupport"] = enable_dns_support
    if enable_dns_hostnames is not None:
        properties["EnableDnsHostnames"] = enable_dns_hostnames
    properties["Tags"] = _tags(name, tags)

    return _resource(name, "AWS::EC2::VPC", properties, depends_on)


def subnet_rc(name: str, vpc, cidr: str, availability_zone: str = "",
              depends_on: Iterable[str] = (), tags: dict = None) -> Resource:
    properties = {
        "VpcId": vpc,
        "CidrBlock": cidr,
    }
    if availability_zone:
        properties["AvailabilityZone"] = availability_zone
    properties["Tags"] = _tags(name, tags)

    return _resource(name, "AWS::EC2::Subnet", properties, depends_on)


def security_group_rc(name: str, description: str, vpc=None, egress: Iterable[dict] = (),
                      ingress: Iterable[dict] = (), depends_on: Iterable[str] = (), tags: dict = None) -> Resource:
    properties = {}
    if vpc is not None:
        properties["VpcId"] = vpc
    properties["GroupDescription"] = description
    if ingress:
        properties["SecurityGroupIngress"] = list(ingress)
    if egress:
        properties["SecurityGroupEgress"] = list(egress)
    properties["Tags"] = _tags(name, tags)

    return _resource(name, "AWS::EC2::SecurityGroup", properties, depends_on)


def network_interface(device_index, **properties) -> dict:
    ret = dict(properties)
    ret["DeviceIndex"] = str(device_index)
    return ret


def instance_vpc_rc(name: str, image_id, subnet, security_groups: list,
                    depends_on: Iterable[str] = (), properties: dict = None) -> Resource:
    properties = properties or {}
    if "NetworkInterfaces" in properties:
        raise TemplateError("can not contain NetworkInterfaces together with subnet or security groups",
                            where=f"vpc instance '{name}'")
    if "SecurityGroups" in properties:
        raise TemplateError("can not contain non-vpc SecurityGroups", where=f"vpc instance '{name}'")

    props = _tagged_properties(name, properties)
    props["ImageId"] = image_id
    props["SubnetId"] = subnet
    props["SecurityGroupIds"] = list(security_groups)

    return _resource(name, INSTANCE_TYPE, props, depends_on)


def instance_with_network_rc(name: str, image_id, network_interfaces: List[dict],
                             depends_on: Iterable[str] = (), properties: dict = None) -> Resource:
    properties = properties or {}
    if (conflicts := [k for k in VPC_ATTACHMENT if k in properties]):
        raise TemplateError(f"can not contain {', '.join(conflicts)} together with NetworkInterfaces",
                            where=f"instance '{name}'")

    props = _tagged_properties(name, properties)
    props["ImageId"] = image_id
    props["NetworkInterfaces"] = list(network_interfaces)

    return _resource(name, INSTANCE_TYPE, props, depends_on)


def check_network_attachment(name: str, spec: dict) -> None:
    properties = spec.get("Properties") or {}
    if "NetworkInterfaces" in properties and any(k in properties for k in VPC_ATTACHMENT):
        raise TemplateError("NetworkInterfaces and subnet/security group ids are mutually exclusive",
                            where=f"resource '{name}'")


def iam_full_access_rcs(role_name: str, *services: str) -> Generator[Resource, None, None]:
    role = {
        "AssumeRolePolicyDocument": {
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {
                        "Service": ["ec2.amazonaws.com"],
                    },
                    "Action": ["sts:AssumeRole"],
                },
            ],
        },
        "Path": "/",
        "Policies": [
            {
                "PolicyName": f"{role_name}Policy",
                "PolicyDocument": {
                    "Statement": [
                        {
                            "Effect": "Allow",
                            "Action": f"{s}:*",
                            "Resource": "*",
                        } for s in services
                    ],
                },
            },
        ],
    }
    yield _resource(f"{role_name}Role", "AWS::IAM::Role", role)

    profile = {
        "Path": "/",
        "Roles": [ref(f"{role_name}Role")],
    }
    yield _resource(f"{role_name}InstanceProfile", "AWS::IAM::InstanceProfile", profile)
