import re
from typing import Any, List, NamedTuple


class Resource(NamedTuple):
    name: str
    spec: dict


class Parameter(NamedTuple):
    name: str
    spec: dict


def ref(name: str) -> dict:
    return {"Ref": name}


def get_att(name: str, attribute: str) -> dict:
    return {"Fn::GetAtt": [name, attribute]}


def join(delimiter: str, *parts: Any) -> dict:
    return {"Fn::Join": [delimiter, list(parts)]}


def find_in_map(map_name: str, top_key: Any, second_key: Any) -> dict:
    return {"Fn::FindInMap": [map_name, top_key, second_key]}


def base64(content: Any) -> dict:
    return {"Fn::Base64": content}


# pseudo parameters, resolved by cloudformation
STACK_NAME = ref("AWS::StackName")
REGION = ref("AWS::Region")


def make_logical_name(s: str) -> str:
    words = (w[:1].upper() + w[1:] for w in re.split(r"[\W_]+", s))
    ret = "".join(words)
    return ret


def underscore(s: str) -> str:
    # CamelCase -> camel_case, dashes and dots -> underscores
    ret = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", s)
    ret = re.sub(r"[\W_]+", "_", ret)
    return ret.lower()


def tags_to_properties(tags: dict) -> List[dict]:
    ret = [{"Key": k, "Value": v} for k, v in tags.items()]
    return ret


def has_tag(tags: List[dict], key: str) -> bool:
    ret = any(t.get("Key") == key for t in tags)
    return ret


def parse_parameters(param_string: str) -> dict:
    """
    Turns the command line parameter overrides, e.g. "Key1=value1;Key2=value2",
    into a dict. Values may themselves contain '='.
    """
    ret = {}
    for item in (param_string or "").split(";"):
        if not item.strip():
            continue
        if "=" not in item:
            raise ValueError(f"malformed parameter '{item}', expected key=value")
        k, v = item.split("=", 1)
        ret[k.strip()] = v
    return ret
