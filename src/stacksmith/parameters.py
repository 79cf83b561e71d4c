import logging
from typing import List

from . import instance_types
from .instance_types import InstanceTypes
from .util import Parameter
from .validation import TemplateError

logger = logging.getLogger(__name__)

ALNUM_MSG = "must begin with a letter and contain only alphanumeric characters."


def key_name_parameter(instance_name: str) -> Parameter:
    spec = {
        "Description": f"Name of the {instance_name} ssh key pair",
        "Type": "String",
        "MinLength": 1,
        "MaxLength": 64,
        "AllowedPattern": "[a-zA-Z][-_a-zA-Z0-9]*",
        "ConstraintDescription": "can contain only alphanumeric characters, dashes and underscores.",
    }
    return Parameter(f"{instance_name}KeyName", spec)


def name_parameter(instance_name: str, default: str = None, min_length: int = 1, max_length: int = 64) -> Parameter:
    spec = {
        "Default": str(default) if default else instance_name,
        "Description": f"{instance_name} name",
        "Type": "String",
        "MinLength": min_length,
        "MaxLength": max_length,
        "AllowedPattern": "[a-zA-Z][a-zA-Z0-9]*",
        "ConstraintDescription": ALNUM_MSG,
    }
    return Parameter(f"{instance_name}Name", spec)


def username_parameter(instance_name: str, default: str = "root",
                       min_length: int = 1, max_length: int = 16) -> Parameter:
    spec = {
        "Default": default,
        "NoEcho": True,
        "Description": f"Username for {instance_name} access",
        "Type": "String",
        "MinLength": min_length,
        "MaxLength": max_length,
        "AllowedPattern": "[a-zA-Z][a-zA-Z0-9]*",
        "ConstraintDescription": ALNUM_MSG,
    }
    return Parameter(f"{instance_name}Username", spec)


def password_parameter(instance_name: str, default: str = "password",
                       min_length: int = 8, max_length: int = 41) -> Parameter:
    spec = {
        "Default": default,
        "NoEcho": True,
        "Description": f"Password for {instance_name} access",
        "Type": "String",
        "MinLength": min_length,
        "MaxLength": max_length,
        "AllowedPattern": "[a-zA-Z0-9]*",
        "ConstraintDescription": "must contain only alphanumeric characters.",
    }
    return Parameter(f"{instance_name}Password", spec)


def allocated_storage_parameter(instance_name: str, default: int = 5, min: int = 5, max: int = 1024) -> Parameter:
    spec = {
        "Default": default,
        "Description": f"The size of the {instance_name} (Gb)",
        "Type": "Number",
        "MinValue": min,
        "MaxValue": max,
        "ConstraintDescription": f"must be between {min} and {max}Gb.",
    }
    return Parameter(f"{instance_name}AllocatedStorage", spec)


def instance_type_parameter(instance_name: str, instance_type: str, allowed_values: List[str],
                            suffix: str = "InstanceType") -> Parameter:
    if instance_type not in allowed_values:
        raise TemplateError(f"instance type '{instance_type}' is not in allowed values: {' '.join(allowed_values)}",
                            where=f"parameter '{instance_name}{suffix}'")

    spec = {
        "Default": instance_type,
        "Description": f"The {instance_name} instance type",
        "Type": "String",
        "AllowedValues": list(allowed_values),
        "ConstraintDescription": "must be a valid instance type.",
    }
    return Parameter(f"{instance_name}{suffix}", spec)


def _catalogued_instance_type(catalogue: InstanceTypes, instance_name: str, instance_type: str,
                              suffix: str) -> Parameter:
    if not catalogue.is_supported(instance_type):
        raise TemplateError(f"instance type '{instance_type}' is not supported",
                            where=f"parameter '{instance_name}{suffix}'")
    if catalogue.is_obsolete(instance_type):
        logger.warning(f"using obsolete instance type {instance_type} for {instance_name}")

    ret = instance_type_parameter(instance_name, instance_type, catalogue.allowed_values(instance_type), suffix)
    return ret


def ec2_instance_type_parameter(instance_name: str, instance_type: str = None) -> Parameter:
    ret = _catalogued_instance_type(instance_types.EC2, instance_name,
                                    instance_type or instance_types.EC2.default, "InstanceType")
    return ret


def rds_instance_type_parameter(instance_name: str, instance_type: str = None) -> Parameter:
    ret = _catalogued_instance_type(instance_types.RDS, instance_name,
                                    instance_type or instance_types.RDS.default, "InstanceClass")
    return ret
