import json

import pytest
import yaml

from stacksmith import pipeline
from stacksmith.pipeline import build_run_queue, cfn_cmd, execute, print_template
from stacksmith.template import Template, TEMPLATE_BODY_LIMIT
from stacksmith.validation import TemplateError


@pytest.fixture
def mock_run_cmd(mocker):
    return mocker.patch("stacksmith.pipeline.run_cmd", return_value=0)


def simple_template(**options) -> Template:
    ret = Template(options)
    ret.description("test template")
    ret.parameter("Size", {"Type": "Number", "Default": 5})
    ret.resource("Topic", {"Type": "AWS::SNS::Topic"})
    return ret


@pytest.mark.parametrize("fmt, loader", [
    ("json", json.loads),
    ("yaml", yaml.safe_load),
])
def test_print_template(capsys, fmt, loader):
    template = simple_template(format=fmt)
    print_template(template)
    result = loader(capsys.readouterr().out)
    assert result == template.to_dict()


def test_cfn_cmd_update(mock_run_cmd):
    template = simple_template(stack_name="test-stack", region="us-east-1")
    result = cfn_cmd(template)
    assert result == 0

    expect = [
        "aws", "cloudformation", "update-stack",
        "--stack-name", "test-stack",
        "--region", "us-east-1",
        "--parameters", json.dumps([{"ParameterKey": "Size", "ParameterValue": "5"}]),
        "--template-body", template.template_body(),
    ]
    mock_run_cmd.assert_called_once_with(expect)


def test_cfn_cmd_create(mock_run_cmd):
    template = simple_template(stack_name="test-stack", region="us-east-1", create_stack=True,
                               capabilities="CAPABILITY_IAM, CAPABILITY_NAMED_IAM")
    cfn_cmd(template)

    command = mock_run_cmd.call_args.args[0]
    assert command[:3] == ["aws", "cloudformation", "create-stack"]
    i = command.index("--capabilities")
    assert command[i + 1:i + 3] == ["CAPABILITY_IAM", "CAPABILITY_NAMED_IAM"]


def test_cfn_cmd_minimal(mock_run_cmd):
    template = Template({"stack_name": "test-stack"})
    cfn_cmd(template)
    command = mock_run_cmd.call_args.args[0]
    assert "--region" not in command
    assert "--parameters" not in command
    assert "--capabilities" not in command


def test_cfn_cmd_too_big(mock_run_cmd):
    template = simple_template(stack_name="test-stack")
    template.description("x" * TEMPLATE_BODY_LIMIT)
    with pytest.raises(TemplateError):
        cfn_cmd(template)
    mock_run_cmd.assert_not_called()


def hook_a(t):
    pass


def hook_b(t):
    pass


@pytest.mark.parametrize("options, expect", [
    ({}, [cfn_cmd]),
    ({"expand": True}, [print_template]),
    ({"pre_run": True}, [hook_a, cfn_cmd]),
    ({"post_run": True}, [cfn_cmd, hook_b]),
    ({"pre_run": True, "post_run": True, "expand": True}, [hook_a, print_template, hook_b]),
])
def test_build_run_queue(options, expect):
    template = Template(options)
    template.pre_run(hook_a)
    template.post_run(hook_b)
    assert build_run_queue(template) == expect


def test_execute_order(mocker):
    calls = []
    mocker.patch.object(pipeline, "cfn_cmd", side_effect=lambda t: calls.append("cfn"))

    template = Template({"pre_run": True, "post_run": True})
    template.pre_run(lambda t: calls.append(("pre", t)))
    template.post_run(lambda t: calls.append(("post", t)))

    execute(template)
    assert calls == [("pre", template), "cfn", ("post", template)]


def test_execute_stops_on_error(mocker):
    mock_cfn = mocker.patch.object(pipeline, "cfn_cmd")
    post = mocker.Mock()

    template = Template({"pre_run": True, "post_run": True})

    @template.pre_run
    def failing(t):
        raise TemplateError("nope")

    template.post_run(post)

    with pytest.raises(TemplateError, match="nope"):
        execute(template)
    mock_cfn.assert_not_called()
    post.assert_not_called()
