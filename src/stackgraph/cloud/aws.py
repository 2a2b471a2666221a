"""Resolve the AWS identity the graph is built for"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

import boto3
import botocore.exceptions

from ..deferred import Deferred
from ..exceptions import IdentityResolutionError, UserResolvableError

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeployerIdentity:
    account_id: str
    region: str


@lru_cache
def get_client(aws_service: str):
    """Get a boto3 client for AWS_SERVICE, setting endpoint and region"""
    args = {}

    endpoint_url = os.environ.get("AWS_ENDPOINT", None)
    if endpoint_url:
        args["endpoint_url"] = endpoint_url

    return boto3.client(aws_service, region_name=get_region(), **args)


def get_region() -> str:
    if "AWS_DEFAULT_REGION" in os.environ:
        return os.environ["AWS_DEFAULT_REGION"]
    elif "AWS_REGION" in os.environ:
        return os.environ["AWS_REGION"]
    else:
        raise UserResolvableError(
            "Could not determine deployment region.",
            "AWS_DEFAULT_REGION or AWS_REGION must be set.",
        )


def get_account_id() -> str:
    try:
        return os.environ["AWS_ACCOUNT_ID"]
    except KeyError:
        pass

    client = get_client("sts")
    try:
        return client.get_caller_identity()["Account"]
    except (botocore.exceptions.BotoCoreError, botocore.exceptions.ClientError) as exc:
        raise IdentityResolutionError(
            f"STS GetCallerIdentity failed ({exc})",
            "Check that AWS credentials are configured (e.g. `aws sts get-caller-identity').",
        ) from exc


def lookup_identity() -> DeployerIdentity:
    """Look up the ambient deployer identity (blocking)"""
    region = get_region()
    account_id = get_account_id()
    LOG.info("Deployer identity: account %s, region %s", account_id, region)
    return DeployerIdentity(account_id=account_id, region=region)


class AccountResolver:
    """Resolve the deployer identity once, in the background.

    Every call to `resolve` returns the same Deferred, so the lookup happens at
    most once per build no matter how many nodes depend on it.
    """

    def __init__(self, lookup: Callable[[], DeployerIdentity] = lookup_identity):
        self.lookup = lookup
        self._identity = None

    def resolve(self) -> Deferred:
        if self._identity is None:
            LOG.debug("Starting identity lookup")
            pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="identity")
            future = pool.submit(self.lookup)
            # The lookup keeps running; the future is waited on at first use
            pool.shutdown(wait=False)
            self._identity = Deferred(future)
        return self._identity

    def account_id(self) -> Deferred:
        return self.resolve().map(lambda ident: ident.account_id)

    def region(self) -> Deferred:
        return self.resolve().map(lambda ident: ident.region)


def arn(service: str, resource: str, identity: Deferred) -> Deferred:
    """Build an ARN for SERVICE in the deployer's account and region"""
    return identity.map(
        lambda ident: f"arn:aws:{service}:{ident.region}:{ident.account_id}:{resource}"
    )


def log_group_arn(function_name: str, identity: Deferred) -> Deferred:
    """ARN covering the log groups of a Lambda function"""
    return arn("logs", f"log-group:/aws/lambda/{function_name}*", identity)


def table_arn(table_name: str, identity: Deferred) -> Deferred:
    """ARN of a DynamoDB table"""
    return arn("dynamodb", f"table/{table_name}", identity)
