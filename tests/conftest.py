from typing import Dict, List

import botocore.exceptions
import pytest

from stacksmith.template import Template


class FakeStackResource:
    def __init__(self, physical_resource_id: str):
        self.physical_resource_id = physical_resource_id


class FakeStack:
    def __init__(self, name: str, stack_status: str = "CREATE_COMPLETE",
                 resources: Dict[str, str] = None, outputs: List[dict] = None):
        self.name = name
        self.stack_status = stack_status
        self.resources = resources or {}
        self.outputs = outputs

    def Resource(self, logical_id: str) -> FakeStackResource:
        if logical_id not in self.resources:
            raise botocore.exceptions.ClientError(
                {"Error": {"Code": "ValidationError",
                           "Message": f"Resource {logical_id} does not exist for stack {self.name}"}},
                "DescribeStackResource")
        return FakeStackResource(self.resources[logical_id])


class FakeCloudFormation:
    def __init__(self, statuses: List[str], **kwargs):
        self.statuses = list(statuses)
        self.kwargs = kwargs
        self.polls = 0
        self.created = []

    def Stack(self, name: str) -> FakeStack:
        status = self.statuses[min(self.polls, len(self.statuses) - 1)]
        self.polls += 1
        return FakeStack(name, status, **self.kwargs)

    def create_stack(self, **kwargs):
        self.created.append(kwargs)
        return FakeStack(kwargs["StackName"], "CREATE_IN_PROGRESS")


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def options() -> dict:
    ret = {
        "stack_name": "test-stack",
        "region": "us-east-1",
        "vpc_stack_name": "test-vpc",
    }
    return ret


@pytest.fixture
def template(options) -> Template:
    return Template(options)
