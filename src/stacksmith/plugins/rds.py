import logging
from typing import List

from ..util import get_att, ref

logger = logging.getLogger(__name__)

STORAGE_TYPES = ["gp2", "standard", "io1"]


def rds_init(template, db_name: str, subnets: List, security_groups: List,
             allocated_storage: int = 5,
             storage_type: str = "gp2",
             instance_class: str = None,
             multi_az: bool = False,
             engine: str = "MySQL") -> dict:
    """
    MySQL (by default) RDS instance inside a vpc, with its name, credentials, size and
    instance class exposed as stack parameters. Adds output <db_name>EndpointAddress.
    """
    prefix = f"RDS{db_name}"

    template.parameter_allocated_storage(prefix, default=allocated_storage, min=5, max=1024)
    template.parameter_name(prefix)
    template.parameter_username(prefix)
    template.parameter_password(prefix)
    template.parameter_rds_instance_type(prefix, instance_class)

    template.parameter(f"{prefix}StorageType", {
        "Default": storage_type,
        "Description": "Storage type to be associated with the DB instance",
        "Type": "String",
        "AllowedValues": STORAGE_TYPES,
    })

    template.resource(f"{prefix}SubnetGroup", {
        "Type": "AWS::RDS::DBSubnetGroup",
        "Properties": {
            "DBSubnetGroupDescription": "Subnet group within VPC",
            "SubnetIds": list(subnets),
            "Tags": [{"Key": "Name", "Value": f"{prefix}SubnetGroup"}],
        },
    })

    ret = template.resource(f"{prefix}Instance", {
        "Type": "AWS::RDS::DBInstance",
        "Properties": {
            "Engine": engine,
            "PubliclyAccessible": "false",
            "DBName": template.param_ref(f"{prefix}Name"),
            "MultiAZ": str(multi_az).lower(),
            "MasterUsername": template.param_ref(f"{prefix}Username"),
            "MasterUserPassword": template.param_ref(f"{prefix}Password"),
            "DBInstanceClass": template.param_ref(f"{prefix}InstanceClass"),
            "VPCSecurityGroups": list(security_groups),
            "DBSubnetGroupName": ref(f"{prefix}SubnetGroup"),
            "AllocatedStorage": template.param_ref(f"{prefix}AllocatedStorage"),
            "StorageType": template.param_ref(f"{prefix}StorageType"),
            "Tags": [{"Key": "Name", "Value": f"{prefix}Instance"}],
        },
    })

    template.output(f"{db_name}EndpointAddress", f"{db_name} Endpoint Address",
                    get_att(f"{prefix}Instance", "Endpoint.Address"))

    logger.debug(f"declared rds instance {prefix}Instance")
    return ret
