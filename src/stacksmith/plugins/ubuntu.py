import logging
from typing import Dict, List

import requests

from ..util import REGION, find_in_map

logger = logging.getLogger(__name__)

IMAGE_INDEX_URL = "https://cloud-images.ubuntu.com/query/{release}/server/released.current.txt"

MAPPING_NAME = "AWSUbuntuAMI"

RELEASES = {
    "precise": "12.04",
    "trusty": "14.04",
    "utopic": "14.10",
    "vivid": "15.04",
    "wily": "15.10",
    "xenial": "16.04",
}

STORAGE = ("ebs", "ebs-ssd", "ebs-io1", "instance-store")

ARCHITECTURES = ("amd64", "i386")


def _codename(release: str) -> str:
    release = str(release) if release is not None else ""
    if release in RELEASES:
        return release
    for codename, version in RELEASES.items():
        if version == release:
            return codename
    raise ValueError(f"unknown ubuntu release '{release}', expected one of {', '.join(RELEASES)}")


def get_mapping(release: str = "trusty", storage: str = "ebs", arch: str = "amd64") -> Dict[str, Dict[str, str]]:
    """
    Fetches the current released ubuntu server images and returns them as a cloudformation
    mapping, {region: {virtualization type: ami id}}.
    """
    codename = _codename(release)
    if storage not in STORAGE:
        raise ValueError(f"unknown root storage '{storage}', expected one of {', '.join(STORAGE)}")
    if arch not in ARCHITECTURES:
        raise ValueError(f"unknown architecture '{arch}', expected one of {', '.join(ARCHITECTURES)}")

    response = requests.get(IMAGE_INDEX_URL.format(release=codename), timeout=30)
    response.raise_for_status()

    # codename, "server", "release", serial, root store, arch, region, ami, aki, ari, virtualization
    ret = {}
    for line in response.text.splitlines():
        fields = line.split("\t")
        if len(fields) < 11:
            continue
        if fields[4] == storage and fields[5] == arch:
            region, ami, virtualization = fields[6], fields[7], fields[10]
            ret.setdefault(region, {})[virtualization] = ami

    logger.info(f"found ubuntu {codename} images in {len(ret)} regions")
    return ret


def ubuntu_init(template, instance_name: str, subnet, security_groups: List,
                release: str = "trusty", storage: str = "ebs", arch: str = "amd64",
                virtualization: str = "hvm", instance_type: str = "t2.small", properties: dict = None) -> dict:
    """
    Ubuntu instance named Ubuntu<instance_name> in the given subnet, with its key pair and
    instance type exposed as stack parameters.
    """
    name = f"Ubuntu{instance_name}"

    template.mapping(MAPPING_NAME, get_mapping(release=release, storage=storage, arch=arch))
    key_name = template.parameter_key_name(name)
    instance_type = template.parameter_ec2_instance_type(name, instance_type)

    props = dict(properties or {})
    props["KeyName"] = key_name
    props["InstanceType"] = instance_type

    ret = template.instance_vpc(name, find_in_map(MAPPING_NAME, REGION, virtualization), subnet, security_groups,
                                properties=props)
    return ret
