from typing import Callable

from voluptuous import (All, Any, Boolean, Coerce, Invalid, Length, Lower, Match, Maybe, Optional, Range,
                        Required, Schema)

LOGICAL_NAME = r"^[A-Za-z][A-Za-z0-9]*$"

DNS_RECORD_TYPES = ("A", "AAAA", "CNAME", "MX", "NS", "PTR", "SOA", "SPF", "SRV", "TXT")
HEALTH_CHECK_TYPES = ("HTTP", "HTTPS", "HTTP_STR_MATCH", "HTTPS_STR_MATCH", "TCP")


class TemplateError(Exception):
    def __init__(self, message: str, where: str = None, field: str = ""):
        super().__init__(message)
        self.where = where
        self.field = field
        self.message = message

    @classmethod
    def from_invalid(cls, invalid_exception: Invalid, where: str = None) -> "TemplateError":
        field = ".".join(str(p) for p in invalid_exception.path)
        return cls(invalid_exception.error_message, where=where, field=field)

    def __str__(self) -> str:
        if self.where is not None:
            if self.field:
                ret = f"in {self.where}, field '{self.field}': {self.message}"
            else:
                ret = f"in {self.where}: {self.message}"
        else:
            if self.field:
                ret = f"field '{self.field}': {self.message}"
            else:
                ret = self.message
        return ret


def ordered_bounds(lower: str, upper: str) -> Callable:
    def _impl(record: dict) -> dict:
        if lower in record and upper in record and record[lower] > record[upper]:
            raise Invalid(f"{lower} ({record[lower]}) is greater than {upper} ({record[upper]})")
        return record
    return _impl


def one_of(kind: str, choices: tuple) -> Callable:
    def _impl(v):
        if not isinstance(v, str) or v not in choices:
            raise Invalid(f"unsupported {kind} '{v}', expected one of: {', '.join(choices)}")
        return v
    return _impl


logical_name = All(str, Match(LOGICAL_NAME, msg="must begin with a letter and contain only alphanumeric characters"))

number = Any(int, float)

parameter_schema = Schema(All(
    {
        Required("Type", msg="parameter Type is required"): Any("String", "Number", "CommaDelimitedList",
                                                                 Match(r"^(AWS::|List<)"),
                                                                 msg="unrecognized parameter type"),
        Optional("Default"): Any(str, number),
        Optional("Description"): All(str, Length(max=4000)),
        Optional("MinLength"): All(int, Range(min=0)),
        Optional("MaxLength"): All(int, Range(min=0)),
        Optional("MinValue"): number,
        Optional("MaxValue"): number,
        Optional("AllowedValues"): All([Any(str, number)], Length(min=1)),
        Optional("AllowedPattern"): str,
        Optional("NoEcho"): bool,
        Optional("ConstraintDescription"): str,
    },
    ordered_bounds("MinLength", "MaxLength"),
    ordered_bounds("MinValue", "MaxValue"),
))

options_schema = Schema({
    Optional("stack_name", default=None): Maybe(All(str, Match(r"^[A-Za-z][-A-Za-z0-9]*$",
                                                               msg="stack name must begin with a letter and "
                                                                   "contain only alphanumeric characters and dashes"))),
    Optional("region", default=None): Maybe(str),
    Optional("vpc_stack_name", default=None): Maybe(str),
    Optional("parameters", default=None): Maybe(str),
    Optional("expand", default=False): Boolean(),
    Optional("format", default="json"): All(str, Lower, Any("json", "yaml", msg="format must be json or yaml")),
    Optional("create_stack", default=False): Boolean(),
    Optional("capabilities", default=None): Maybe(str),
    Optional("availability_zone", default="all"): All(str, Lower, Any("all", Match(r"^[a-z]$"),
                                                                      msg="availability zone must be 'all' "
                                                                          "or a single zone letter")),
    Optional("hosted_zone", default=None): Maybe(str),
    Optional("pre_run", default=False): Boolean(),
    Optional("post_run", default=False): Boolean(),
    Optional("timeout", default=None): Maybe(All(Coerce(int), Range(min=1))),
})

dns_record_type = Schema(one_of("dns record type", DNS_RECORD_TYPES))

health_check_type = Schema(one_of("health check type", HEALTH_CHECK_TYPES))

health_check_id = Schema(Any(str, dict, msg="health check must be an id or a reference"))

alias_target = Schema({
    Required("HostedZoneId", msg="alias target requires HostedZoneId"): Any(str, dict),
    Required("DNSName", msg="alias target requires DNSName"): Any(str, dict),
    Optional("EvaluateTargetHealth"): bool,
})


def validate(spec, schema: Schema, where: str):
    try:
        ret = schema(spec)
        return ret
    except Invalid as inv:
        raise TemplateError.from_invalid(inv, where=where)


def validate_parameter(name: str, spec: dict) -> dict:
    validate(name, Schema(logical_name), f"parameter name '{name}'")
    ret = validate(spec, parameter_schema, f"parameter '{name}'")
    return ret


def validate_options(options: dict) -> dict:
    ret = validate(options, options_schema, "options")
    return ret
