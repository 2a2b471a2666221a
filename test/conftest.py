"""Shared test fixtures"""

import pytest

from stackgraph.cloud import aws
from stackgraph.cloud.aws import AccountResolver, DeployerIdentity
from stackgraph.naming import StackContext

ACCOUNT_ID = "123456789012"
REGION = "eu-west-2"


def fixed_resolver(account_id=ACCOUNT_ID, region=REGION) -> AccountResolver:
    """A resolver that never touches AWS"""
    return AccountResolver(lambda: DeployerIdentity(account_id, region))


@pytest.fixture
def ctx():
    return StackContext("dev", "todos")


@pytest.fixture
def resolver():
    return fixed_resolver()


@pytest.fixture
def aws_env(monkeypatch):
    """Fake AWS environment, with a fresh client cache"""
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    for name in ["AWS_REGION", "AWS_ACCOUNT_ID", "AWS_ENDPOINT", "AWS_PROFILE"]:
        monkeypatch.delenv(name, raising=False)
    aws.get_client.cache_clear()
    yield
    aws.get_client.cache_clear()
