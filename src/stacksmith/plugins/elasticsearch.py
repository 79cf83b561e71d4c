from typing import List

from ..util import get_att, ref

DEFAULT_OS = "Amazon Linux 2015.09"
DEFAULT_COOKBOOK = "https://github.com/en-japan/opsworks-elasticsearch-cookbook.git"
DATA_PATH = "/mnt/elasticsearch-data"


def _assume_role_policy(service: str) -> dict:
    ret = {
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {
                    "Service": [service],
                },
                "Action": ["sts:AssumeRole"],
            },
        ],
    }
    return ret


def _role(policy_name: str, service: str, actions: List[str]) -> dict:
    ret = {
        "Type": "AWS::IAM::Role",
        "Properties": {
            "AssumeRolePolicyDocument": _assume_role_policy(service),
            "Path": "/",
            "Policies": [
                {
                    "PolicyName": policy_name,
                    "PolicyDocument": {
                        "Statement": [
                            {
                                "Effect": "Allow",
                                "Action": actions,
                                "Resource": "*",
                            },
                        ],
                    },
                },
            ],
        },
    }
    return ret


def _custom_json(cluster_name: str, stack_name: str, region: str) -> dict:
    ret = {
        "java": {
            "jdk_version": "8",
            "oracle": {
                "accept_oracle_download_terms": "true",
            },
            "accept_license_agreement": "true",
            "install_flavor": "oracle",
        },
        "elasticsearch": {
            "plugins": [
                "analysis-kuromoji",
                "cloud-aws",
                {"name": "elasticsearch-head", "url": "mobz/elasticsearch-head"},
            ],
            "cluster": {
                "name": cluster_name,
            },
            "gateway": {
                "expected_nodes": 1,
            },
            "discovery": {
                "type": "ec2",
                "zen": {
                    "minimum_master_nodes": 1,
                    "ping": {
                        "multicast": {
                            "enabled": False,
                        },
                    },
                },
                "ec2": {
                    "tag": {
                        "opsworks:stack": stack_name,
                    },
                },
            },
            "path": {
                "data": DATA_PATH,
            },
            "cloud": {
                "aws": {
                    "region": region,
                },
            },
            "custom_config": {
                "cluster.routing.allocation.awareness.attributes": "rack_id",
            },
        },
    }
    return ret


def elasticsearch_init(template, app_name: str, vpc, subnet, private_security_group, ssh_key: str,
                       os: str = DEFAULT_OS, cookbook: str = DEFAULT_COOKBOOK, volume_size: int = 100) -> dict:
    """
    OpsWorks stack with one custom layer running an elasticsearch cluster from a chef cookbook.
    """
    cookbook_param = template.parameter(f"ES{app_name}ChefCookbook", {
        "Default": cookbook,
        "Description": "Git url of the elasticsearch cookbook",
        "Type": "String",
    })
    os_param = template.parameter(f"ES{app_name}InstanceDefaultOs", {
        "Default": os,
        "Description": "The stack's default operating system, installed on every instance unless "
                       "you specify a different one when you create the instance",
        "Type": "String",
    })
    key_param = template.parameter(f"ES{app_name}SshKeyName", {
        "Default": ssh_key,
        "Description": "SSH key name for EC2 instances",
        "Type": "String",
    })

    template.resource("OpsWorksEC2Role", _role(f"{app_name}-opsworks-ec2-role", "ec2.amazonaws.com", [
        "ec2:DescribeInstances",
        "ec2:DescribeRegions",
        "ec2:DescribeSecurityGroups",
        "ec2:DescribeTags",
        "cloudwatch:PutMetricData",
    ]))
    template.resource("ServiceRole", _role(f"{app_name}-opsworks-service", "opsworks.amazonaws.com", [
        "ec2:*",
        "iam:PassRole",
        "cloudwatch:GetMetricStatistics",
        "elasticloadbalancing:*",
    ]))
    template.resource("InstanceRole", {
        "Type": "AWS::IAM::InstanceProfile",
        "Properties": {
            "Path": "/",
            "Roles": [ref("OpsWorksEC2Role")],
        },
    })

    cluster_sg = f"ES{app_name}ClusterSecurityGroup"
    template.security_group_vpc(cluster_sg, "so that ES cluster can find other nodes", vpc)

    stack_name = f"{app_name}-ES"
    template.resource("ESStack", {
        "Type": "AWS::OpsWorks::Stack",
        "Properties": {
            "Name": stack_name,
            "VpcId": vpc,
            "DefaultSubnetId": subnet,
            "ConfigurationManager": {
                "Name": "Chef",
                "Version": "12",
            },
            "UseCustomCookbooks": "true",
            "CustomCookbooksSource": {
                "Type": "git",
                "Url": cookbook_param,
            },
            "DefaultOs": os_param,
            "DefaultRootDeviceType": "ebs",
            "DefaultSshKeyName": key_param,
            "CustomJson": _custom_json(f"{app_name}-elasticsearch", stack_name, template.region),
            "ServiceRoleArn": get_att("ServiceRole", "Arn"),
            "DefaultInstanceProfileArn": get_att("InstanceRole", "Arn"),
        },
    })

    ret = template.resource("ESLayer", {
        "Type": "AWS::OpsWorks::Layer",
        "Properties": {
            "StackId": ref("ESStack"),
            "Name": "Search",
            "Type": "custom",
            "Shortname": "search",
            "CustomRecipes": {
                "Setup": ["apt", "ark", "elasticsearch", "java", "layer-custom::esplugins"],
            },
            "EnableAutoHealing": "true",
            "AutoAssignElasticIps": "false",
            "AutoAssignPublicIps": "false",
            "VolumeConfigurations": [
                {
                    "MountPoint": DATA_PATH,
                    "NumberOfDisks": 1,
                    "VolumeType": "gp2",
                    "Size": volume_size,
                },
            ],
            "CustomSecurityGroupIds": [get_att(cluster_sg, "GroupId"), private_security_group],
        },
    })
    return ret
