import pytest

from stacksmith.util import Parameter, Resource, base64, find_in_map, get_att, has_tag, join, make_logical_name, \
    parse_parameters, ref, tags_to_properties, underscore, REGION, STACK_NAME


def test_ref():
    assert ref("MyThing") == {"Ref": "MyThing"}


def test_get_att():
    assert get_att("MyDb", "Endpoint.Address") == {"Fn::GetAtt": ["MyDb", "Endpoint.Address"]}


def test_join():
    result = join("-", STACK_NAME, "web")
    expect = {"Fn::Join": ["-", [{"Ref": "AWS::StackName"}, "web"]]}
    assert result == expect


def test_find_in_map():
    result = find_in_map("AMIs", REGION, "hvm")
    expect = {"Fn::FindInMap": ["AMIs", {"Ref": "AWS::Region"}, "hvm"]}
    assert result == expect


def test_base64():
    assert base64("#!/bin/bash") == {"Fn::Base64": "#!/bin/bash"}


def test_named_tuples():
    rc = Resource("Name", {"Type": "X"})
    assert rc.name == "Name"
    assert rc.spec == {"Type": "X"}
    name, spec = Parameter("P", {"Type": "String"})
    assert name == "P"
    assert spec == {"Type": "String"}


@pytest.mark.parametrize("name, expect", [
    ("abc", "Abc"),
    ("abc-def", "AbcDef"),
    ("abc_def.ghi", "AbcDefGhi"),
    ("ABC", "ABC"),
    ("MyStack", "MyStack"),
    ("my-WebApp", "MyWebApp"),
])
def test_make_logical_name(name, expect):
    assert make_logical_name(name) == expect


@pytest.mark.parametrize("s, expect", [
    ("simple", "simple"),
    ("CamelCase", "camel_case"),
    ("us-east-1", "us_east_1"),
    ("My.App-Stack", "my_app_stack"),
])
def test_underscore(s, expect):
    assert underscore(s) == expect


def test_tags_to_properties():
    result = tags_to_properties({"Name": "x", "Env": "dev"})
    assert result == [{"Key": "Name", "Value": "x"}, {"Key": "Env", "Value": "dev"}]


@pytest.mark.parametrize("key, expect", [
    ("Name", True),
    ("Env", False),
])
def test_has_tag(key, expect):
    tags = [{"Key": "Name", "Value": "x"}]
    assert has_tag(tags, key) == expect


@pytest.mark.parametrize("param_string, expect", [
    (None, {}),
    ("", {}),
    ("a=1;b=2", {"a": "1", "b": "2"}),
    ("a=1;", {"a": "1"}),
    ("url=http://x?y=z", {"url": "http://x?y=z"}),
])
def test_parse_parameters(param_string, expect):
    assert parse_parameters(param_string) == expect


def test_parse_parameters_malformed():
    with pytest.raises(ValueError, match="malformed parameter 'oops'"):
        parse_parameters("a=1;oops")
