import logging

import pytest

from conftest import FakeCloudFormation
from stacksmith.pipeline import execute
from stacksmith.template import Template
from stacksmith.templates import TEMPLATES, load_template
from stacksmith.templates import rds_standalone
from stacksmith.validation import TemplateError

VPC_RESOURCES = {
    "PrivateSubnet1": "subnet-1",
    "PrivateSubnet2": "subnet-2",
}

VPC_OUTPUTS = [
    {"OutputKey": "PrivateSecurityGroup", "OutputValue": "sg-1"},
]


def example_builder(tpl):
    tpl.description("example")


def test_load_template_registry():
    result = load_template("rds-standalone")
    assert result is rds_standalone.build
    assert "rds-standalone" in TEMPLATES


def test_load_template_module_function():
    result = load_template("test_templates:example_builder")
    assert result is example_builder


@pytest.mark.parametrize("name, message", [
    ("nope", "unknown template 'nope'"),
    ("nope:", "unknown template"),
    ("no_such_module_xyz:build", "unable to import template module no_such_module_xyz"),
    ("stacksmith.templates.rds_standalone:nope", "has no function nope"),
    ("stacksmith.templates.rds_standalone:DB_NAME", "has no function DB_NAME"),
])
def test_load_template_fail(name, message):
    with pytest.raises(TemplateError, match=message):
        load_template(name)


@pytest.fixture
def vpc_cfn(mocker) -> FakeCloudFormation:
    ret = FakeCloudFormation(["CREATE_COMPLETE"], resources=VPC_RESOURCES, outputs=VPC_OUTPUTS)
    mocker.patch("stacksmith.templates.rds_standalone.cfn_resource", return_value=ret)
    return ret


def test_rds_standalone(template, vpc_cfn):
    rds_standalone.build(template)

    assert template.doc["Description"] == "RDS stack with a standalone MySQL instance"
    props = template.doc["Resources"]["RDSStandaloneInstance"]["Properties"]
    assert props["VPCSecurityGroups"] == ["sg-1"]
    subnets = template.doc["Resources"]["RDSStandaloneSubnetGroup"]["Properties"]["SubnetIds"]
    assert subnets == ["subnet-1", "subnet-2"]
    assert len(template.pre_run_hooks) == 1
    assert len(template.post_run_hooks) == 1


def test_rds_standalone_needs_vpc_stack_name(vpc_cfn):
    template = Template({"region": "us-east-1"})
    with pytest.raises(TemplateError, match="requires vpc-stack-name"):
        rds_standalone.build(template)


def test_rds_standalone_missing_vpc_resources(options, mocker):
    cfn = FakeCloudFormation(["CREATE_COMPLETE"], resources={"PrivateSubnet1": "subnet-1"}, outputs=VPC_OUTPUTS)
    mocker.patch("stacksmith.templates.rds_standalone.cfn_resource", return_value=cfn)
    mock_cfn_cmd = mocker.patch("stacksmith.pipeline.cfn_cmd")

    options["pre_run"] = True
    template = Template(options)
    rds_standalone.build(template)

    with pytest.raises(TemplateError, match="vpc stack test-vpc is missing some of"):
        execute(template)
    mock_cfn_cmd.assert_not_called()


def test_rds_standalone_post_run(options, mocker, vpc_cfn):
    mocker.patch("stacksmith.pipeline.cfn_cmd")
    mock_upsert = mocker.patch("stacksmith.templates.rds_standalone.upsert_dns_record")

    options["post_run"] = True
    options["hosted_zone"] = "example.com"
    template = Template(options)
    rds_standalone.build(template)

    vpc_cfn.kwargs["outputs"] = [{"OutputKey": "StandaloneEndpointAddress", "OutputValue": "db.abc.rds.amazonaws.com"}]
    execute(template)

    mock_upsert.assert_called_once_with("example.com.", "test-stack-db.example.com.", "CNAME",
                                        ["db.abc.rds.amazonaws.com"])


def test_rds_standalone_post_run_no_zone(options, mocker, vpc_cfn, caplog):
    mocker.patch("stacksmith.pipeline.cfn_cmd")
    mock_upsert = mocker.patch("stacksmith.templates.rds_standalone.upsert_dns_record")

    options["post_run"] = True
    template = Template(options)
    rds_standalone.build(template)

    with caplog.at_level(logging.INFO):
        execute(template)
    mock_upsert.assert_not_called()
    assert "no hosted zone configured" in caplog.text
