"""
build and deploy cloudformation templates

Usage:
    stacksmith <template> [options]
    stacksmith --list
    stacksmith -h | --help
    stacksmith --version

Options:
    -s --stack-name=NAME         name of the stack to create or update
    -r --region=REGION           aws region, defaults to $AWS_DEFAULT_REGION
    --vpc-stack-name=NAME        stack providing the vpc, subnets and security groups
    -p --parameters=PARAMS       parameter overrides: "Key1=value1;Key2=value2"
    -e --expand                  print the template instead of submitting it
    --format=FORMAT              output format for --expand: json | yaml [default: json]
    -c --create-stack            create the stack instead of updating it
    --capabilities=CAPS          capabilities to acknowledge, e.g. CAPABILITY_IAM
    -z --availability-zone=ZONE  availability zone suffix letter, or all [default: all]
    --hosted-zone=ZONE           route53 hosted zone for dns records
    --pre-run                    run the template's pre-run hooks
    --post-run                   run the template's post-run hooks
    --timeout=SECONDS            stop waiting for stacks after this many seconds
    --json-logs                  log json records
    -v --verbose                 debug logging
    --list                       list built-in templates
    -h --help                    show help
    --version                    show version
"""

import logging.config
import os

from docopt import docopt

from . import pipeline
from .custom_logs import logging_config
from .template import Template
from .templates import TEMPLATES, load_template
from .validation import TemplateError
from .version import VERSION

logger = logging.getLogger(__name__)


def options_from_args(args: dict) -> dict:
    ret = {
        "stack_name":        args["--stack-name"],
        "region":            args["--region"] or os.environ.get("AWS_DEFAULT_REGION"),
        "vpc_stack_name":    args["--vpc-stack-name"],
        "parameters":        args["--parameters"],
        "expand":            args["--expand"],
        "format":            args["--format"],
        "create_stack":      args["--create-stack"],
        "capabilities":      args["--capabilities"],
        "availability_zone": args["--availability-zone"],
        "hosted_zone":       args["--hosted-zone"],
        "pre_run":           args["--pre-run"],
        "post_run":          args["--post-run"],
        "timeout":           args["--timeout"],
    }
    return ret


def configure_logging(verbose: bool, json_logs: bool, stack_name: str = None, region: str = None) -> None:
    level = "DEBUG" if verbose else "INFO"
    if json_logs:
        logging.config.dictConfig(logging_config(stack_name, region, level))
    else:
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(template_name: str, options: dict) -> int:
    try:
        build = load_template(template_name)
        template = Template(options)
        build(template)
        pipeline.execute(template)
        ret = 0

    except TemplateError as te:
        logger.error(str(te))
        ret = 1

    except Exception:
        logger.exception(f"template {template_name} failed")
        ret = 2

    return ret


def cli() -> int:
    args = docopt(__doc__, version=VERSION)

    if args["--list"]:
        for name, target in TEMPLATES.items():
            print(f"{name}\t{target}")
        return 0

    options = options_from_args(args)
    configure_logging(args["--verbose"], args["--json-logs"], options["stack_name"], options["region"])
    logger.debug(f"{args=}")

    ret = main(args["<template>"], options)
    return ret
