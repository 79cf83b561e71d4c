import json
import logging
import re
from typing import Callable, List, Optional

import yaml

from .runnit import run_cmd

logger = logging.getLogger(__name__)

Step = Callable[["Template"], None]


def print_template(template) -> None:
    if template.options["format"] == "yaml":
        print(yaml.safe_dump(template.to_dict(), sort_keys=False), end="")
    else:
        print(template.to_json(indent=2))


def cfn_cmd(template) -> Optional[int]:
    """
    Submits the template with `aws cloudformation create-stack` or `update-stack`.
    """
    options = template.options

    # fails before anything gets launched if the template is too big
    template_body = template.template_body()

    command = ["aws", "cloudformation", "create-stack" if options["create_stack"] else "update-stack"]

    if template.stack_name:
        command.extend(["--stack-name", template.stack_name])

    if options["region"]:
        command.extend(["--region", template.region])

    if options["capabilities"]:
        command.append("--capabilities")
        command.extend(c for c in re.split(r"[,\s]+", options["capabilities"]) if c)

    if (parameters := template.stack_parameters()):
        command.extend(["--parameters", json.dumps(parameters)])

    command.extend(["--template-body", template_body])

    logger.info(f"running {' '.join(command[:3])} for stack {template.stack_name}")
    ret = run_cmd(command)
    return ret


def build_run_queue(template) -> List[Step]:
    options = template.options
    ret = []

    if options["pre_run"]:
        ret.extend(template.pre_run_hooks)

    ret.append(print_template if options["expand"] else cfn_cmd)

    if options["post_run"]:
        ret.extend(template.post_run_hooks)

    return ret


def execute(template) -> None:
    """
    Runs pre-run hooks, prints or submits the template, then runs post-run hooks, in that
    order. Hooks only run when enabled in the template options. Any exception stops the queue.
    """
    for step in build_run_queue(template):
        logger.debug(f"running {getattr(step, '__name__', repr(step))}")
        step(template)
