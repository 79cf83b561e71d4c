import importlib
import logging
from typing import Callable

from ..validation import TemplateError

logger = logging.getLogger(__name__)

Builder = Callable[["Template"], None]

TEMPLATES = {
    "rds-standalone": "stacksmith.templates.rds_standalone:build",
}


def load_template(name: str) -> Builder:
    """
    Finds a template's build function, either by registry key or as package.module:function.
    """
    target = TEMPLATES.get(name, name)
    module_name, sep, func_name = target.partition(":")
    if not sep or not module_name or not func_name:
        raise TemplateError(f"unknown template '{name}', expected one of {', '.join(TEMPLATES)} "
                            f"or package.module:function")

    try:
        module = importlib.import_module(module_name)
    except ImportError as ie:
        raise TemplateError(f"unable to import template module {module_name}: {ie}")

    ret = getattr(module, func_name, None)
    if not callable(ret):
        raise TemplateError(f"template module {module_name} has no function {func_name}")

    logger.debug(f"loaded template {target}")
    return ret
