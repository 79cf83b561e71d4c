import logging
import re
from typing import Dict, Iterable, List, Optional

import backoff
import boto3
import botocore.exceptions

logger = logging.getLogger(__name__)

POLL_INTERVAL = 5

IN_PROGRESS = re.compile(r"(CREATE|UPDATE)_IN_PROGRESS$")


def cfn_resource(region: str):
    if not region:
        raise ValueError("unable to proceed without region")
    return boto3.resource("cloudformation", region_name=region)


def in_progress(stack) -> bool:
    return IN_PROGRESS.search(stack.stack_status) is not None


def _log_progress(details: dict) -> None:
    stack = details["value"]
    logger.info(f"waiting for stack {stack.name} [{stack.stack_status}] ({details['tries']} polls)")


def _log_giveup(details: dict) -> None:
    stack = details["value"]
    logger.warning(f"stopped waiting for stack {stack.name} after {details['elapsed']:.0f}s, "
                   f"still {stack.stack_status}")


def wait_stack(cfn, stack_name: str, interval: float = POLL_INTERVAL, max_time: float = None):
    """
    Polls a stack every `interval` seconds until it is no longer being created or updated and
    returns it. Failed stacks are returned like completed ones, so check stack_status.

    Waits forever unless max_time (seconds) is given; when that runs out the stack is returned
    still in progress.
    """
    @backoff.on_predicate(backoff.constant, in_progress,
                          interval=interval,
                          jitter=None,
                          max_time=max_time,
                          on_backoff=_log_progress,
                          on_giveup=_log_giveup)
    def _poll():
        return cfn.Stack(stack_name)

    ret = _poll()
    logger.info(f"stack {stack_name} is {ret.stack_status}")
    return ret


def get_resource(stack, key: str) -> Optional[str]:
    """
    Looks up the physical id of the stack's resource named key, falling back to the value
    of the output named key. Returns None if neither exists.
    """
    if stack is None:
        raise ValueError("stack must not be None")
    if not key:
        raise ValueError("key must not be None nor empty")

    try:
        ret = stack.Resource(key).physical_resource_id
    except botocore.exceptions.ClientError as ce:
        logger.debug(f"resource {key} not found: {ce.response['Error'].get('Message')}")
        ret = None

    if ret is None:
        ret = next((o.get("OutputValue") for o in stack.outputs or [] if o.get("OutputKey") == key), None)

    return ret


def get_resources(stack, keys: Iterable[str]) -> List[str]:
    if stack is None:
        raise ValueError("stack must not be None")
    keys = list(keys or [])
    if not keys:
        raise ValueError("keys must not be None nor empty")

    ret = [r for r in (get_resource(stack, k) for k in keys) if r is not None]
    return ret


def generate_parameters(stack, keys: Iterable[str]) -> List[dict]:
    ret = [{"ParameterKey": k, "ParameterValue": get_resource(stack, k)} for k in keys]
    return ret


def create_stack(region: str, dependent_stack_name: str, template_body: str, stack_name: str,
                 keys: Iterable[str] = (), extra_parameters: Dict[str, str] = None,
                 capabilities: Iterable[str] = ()):
    """
    Creates stack_name through the cloudformation api, passing the ids of the given keys in
    dependent_stack_name as parameters.
    """
    cfn = cfn_resource(region)
    dependency = wait_stack(cfn, dependent_stack_name)

    parameters = []
    for p in generate_parameters(dependency, keys):
        if p["ParameterValue"] is None:
            logger.warning(f"{p['ParameterKey']} not found in stack {dependent_stack_name}, skipping")
        else:
            parameters.append(p)

    for k, v in (extra_parameters or {}).items():
        parameters.append({"ParameterKey": k, "ParameterValue": str(v)})

    logger.info(f"creating stack {stack_name} with {len(parameters)} parameters")
    ret = cfn.create_stack(StackName=stack_name,
                           TemplateBody=template_body,
                           Parameters=parameters,
                           Capabilities=list(capabilities))
    return ret
