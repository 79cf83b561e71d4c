import logging
import os
from typing import Dict, Iterable, List

import boto3
import jmespath

from .util import base64, underscore
from .validation import TemplateError

logger = logging.getLogger(__name__)

USER_DATA_DIR = "user-data"

DEFAULT_AMI_FILTERS = {
    "state": ["available"],
    "architecture": ["x86_64"],
    "root-device-type": ["ebs"],
    "virtualization-type": ["hvm"],
}


def ec2_client(region: str):
    if not region:
        raise ValueError("unable to proceed without region")
    return boto3.client("ec2", region_name=region)


def _is_ec2_client(client) -> bool:
    try:
        return client.meta.service_model.service_name == "ec2"
    except AttributeError:
        return False


def find_ami(client, owners: Iterable[str] = ("amazon",), filters: Dict[str, List[str]] = None) -> List[dict]:
    """
    Returns the images matching owners and filters, newest first.
    """
    if not _is_ec2_client(client):
        raise ValueError("an ec2 client is required to find images")

    filters = DEFAULT_AMI_FILTERS if filters is None else filters
    response = client.describe_images(Owners=list(owners),
                                      Filters=[{"Name": k, "Values": list(v)} for k, v in filters.items()])
    ret = jmespath.search("reverse(sort_by(Images, &CreationDate))", response)
    logger.debug(f"found {len(ret)} images")
    return ret


def get_availability_zones(client, zone: str = "all") -> Dict[str, str]:
    """
    Maps zone suffix letters to zone names, e.g. {"a": "us-east-1a"}, for every available
    zone in the client's region, or just the requested one.
    """
    response = client.describe_availability_zones()
    names = jmespath.search("AvailabilityZones[?State=='available'].ZoneName", response) or []
    zones = {n[-1]: n for n in sorted(names)}

    if zone == "all":
        return zones
    if zone in zones:
        return {zone: zones[zone]}

    raise TemplateError(f"requested zone {zone} is not supported in {client.meta.region_name}, "
                        f"supported ones are {','.join(zones)}")


def gen_ssh_key_name(app_name: str, region: str, stack_name: str) -> str:
    ret = "_".join(underscore(s) for s in (app_name, region, stack_name))
    return ret


def create_ssh_key(key_name: str, region: str, force_create: bool = False, directory: str = "~/.ssh") -> str:
    """
    Makes sure an ec2 key pair called key_name exists. A newly created private key is saved
    as <directory>/<key_name>, readable by the owner only.
    """
    client = ec2_client(region)
    existing = jmespath.search("KeyPairs[].KeyName", client.describe_key_pairs()) or []

    if key_name in existing:
        if not force_create:
            logger.info(f"key pair {key_name} already exists")
            return key_name
        logger.warning(f"replacing key pair {key_name}")
        client.delete_key_pair(KeyName=key_name)

    response = client.create_key_pair(KeyName=key_name)

    key_dir = os.path.expanduser(directory)
    os.makedirs(key_dir, exist_ok=True)
    key_file = os.path.join(key_dir, key_name)
    fd = os.open(key_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as fp:
        fp.write(response["KeyMaterial"])
    os.chmod(key_file, 0o600)

    logger.info(f"private key for {key_name} saved to {key_file}")
    return key_name


def read_user_data(app_name: str, directory: str = USER_DATA_DIR) -> dict:
    path = os.path.join(directory, app_name)
    if not os.path.isfile(path):
        raise TemplateError(f"user data file {path} not found", where=f"user data for '{app_name}'")

    with open(path) as fp:
        ret = base64(fp.read())
    return ret
