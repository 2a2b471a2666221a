"""Test deployer identity resolution"""
import threading

import pytest
from botocore.stub import Stubber

from stackgraph.cloud import aws
from stackgraph.cloud.aws import AccountResolver, DeployerIdentity
from stackgraph.deferred import Deferred
from stackgraph.exceptions import IdentityResolutionError, UserResolvableError

from conftest import ACCOUNT_ID, REGION

CALLER_IDENTITY = {
    "UserId": "AIDAEXAMPLE",
    "Account": ACCOUNT_ID,
    "Arn": f"arn:aws:iam::{ACCOUNT_ID}:user/deployer",
}


def test_lookup_uses_sts(aws_env):
    client = aws.get_client("sts")
    with Stubber(client) as stubber:
        stubber.add_response("get_caller_identity", CALLER_IDENTITY, {})
        identity = aws.lookup_identity()
        stubber.assert_no_pending_responses()

    assert identity == DeployerIdentity(ACCOUNT_ID, REGION)


def test_sts_failure(aws_env):
    client = aws.get_client("sts")
    with Stubber(client) as stubber:
        stubber.add_client_error(
            "get_caller_identity", service_error_code="ExpiredToken"
        )
        with pytest.raises(IdentityResolutionError):
            aws.lookup_identity()


def test_account_id_from_environment(aws_env, monkeypatch):
    monkeypatch.setenv("AWS_ACCOUNT_ID", "999999999999")
    assert aws.lookup_identity() == DeployerIdentity("999999999999", REGION)


def test_region(aws_env, monkeypatch):
    assert aws.get_region() == REGION
    monkeypatch.delenv("AWS_DEFAULT_REGION")
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    assert aws.get_region() == "us-east-1"
    monkeypatch.delenv("AWS_REGION")
    with pytest.raises(UserResolvableError):
        aws.get_region()


def test_resolver_looks_up_once():
    calls = []

    def lookup():
        calls.append(1)
        return DeployerIdentity(ACCOUNT_ID, REGION)

    resolver = AccountResolver(lookup)
    first = resolver.resolve()
    assert isinstance(first, Deferred)
    assert resolver.resolve() is first
    assert resolver.account_id().result() == ACCOUNT_ID
    assert resolver.region().result() == REGION
    assert len(calls) == 1


def test_resolution_is_asynchronous():
    release = threading.Event()

    def lookup():
        release.wait(timeout=5)
        return DeployerIdentity(ACCOUNT_ID, REGION)

    resolver = AccountResolver(lookup)
    identity = resolver.resolve()
    arn = aws.table_arn("dev-todos", identity)
    assert not identity.future.done()
    assert not arn.resolved

    release.set()
    assert arn.result() == f"arn:aws:dynamodb:{REGION}:{ACCOUNT_ID}:table/dev-todos"


def test_resolution_failure_surfaces():
    def lookup():
        raise IdentityResolutionError("no credentials", "configure some")

    resolver = AccountResolver(lookup)
    with pytest.raises(IdentityResolutionError):
        resolver.account_id().result()


def test_arns():
    identity = Deferred.of(DeployerIdentity(ACCOUNT_ID, REGION))
    assert (
        aws.log_group_arn("dev-todos-createTodo", identity).result()
        == f"arn:aws:logs:{REGION}:{ACCOUNT_ID}:log-group:/aws/lambda/dev-todos-createTodo*"
    )
    assert (
        aws.table_arn("dev-todos", identity).result()
        == f"arn:aws:dynamodb:{REGION}:{ACCOUNT_ID}:table/dev-todos"
    )
