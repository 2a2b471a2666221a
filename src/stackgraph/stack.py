"""The todo service stack.

A table, an execution role and its policy, a function (plus a dependency
layer), and a public REST endpoint that invokes the function.

Nodes are declared strictly in dependency order: each one may only reference
nodes declared above it.
"""

import logging
from pathlib import Path

from . import nodes
from .cloud.aws import AccountResolver, log_group_arn, table_arn
from .config import Config, relative_root_path
from .config_classes import ApiConfig, FunctionConfig
from .deferred import Interpolation
from .graph import Graph
from .naming import StackContext

LOG = logging.getLogger(__name__)

TABLE_ENV_VAR = "DYNAMODB_TABLE"
API_URL_OUTPUT = "createTodoApiUrl"


def build_stack(
    ctx: StackContext,
    resolver: AccountResolver,
    function: FunctionConfig = None,
    api: ApiConfig = None,
    cwd: Path = None,
) -> Graph:
    """Declare every resource of the stack and return the assembled graph"""
    function = function or FunctionConfig()
    api = api or ApiConfig()
    graph = Graph(ctx)
    identity = resolver.resolve()

    LOG.info("Building stack %s", ctx.name())
    graph.configure_provider("aws", region=resolver.region())

    table_name = ctx.name()
    role_name = ctx.name("executionRole")
    function_name = ctx.name("createTodo")

    table = graph.add(nodes.table(table_name, hash_key="id", tags=ctx.tags))

    role = graph.add(nodes.role(role_name, nodes.LAMBDA_PRINCIPAL, tags=ctx.tags))

    policy = nodes.policy_document(
        nodes.allow(nodes.LOG_ACTIONS, log_group_arn(function_name, identity)),
        nodes.allow(nodes.TABLE_ITEM_ACTIONS, table_arn(table_name, identity)),
    )
    graph.add(nodes.role_policy(f"{role_name}-policy", role, policy))

    code_archive = relative_root_path(function.code_archive, cwd)
    layer_archive = relative_root_path(function.layer_archive, cwd)
    LOG.debug("Archives: %s, %s", code_archive, layer_archive)

    layer = graph.add(
        nodes.layer_version(
            ctx.name("lambda-layer-nodemodules"), layer_archive, [function.runtime]
        )
    )

    fn = graph.add(
        nodes.function(
            function_name,
            role.output("arn"),
            code_archive,
            runtime=function.runtime,
            handler=function.handler,
            memory=function.memory,
            layers=[layer.output("arn")],
            environment={TABLE_ENV_VAR: table.output("name")},
            tags=ctx.tags,
        )
    )

    rest = graph.add(nodes.rest_api(ctx.name("rest")))
    resource = graph.add(nodes.api_resource(ctx.name("resource"), rest, api.path_part))
    method = graph.add(nodes.api_method(ctx.name("method"), rest, resource, "POST"))
    integration = graph.add(
        nodes.proxy_integration(
            ctx.name("integration-post"), rest, resource, method, fn
        )
    )
    deployment = graph.add(
        nodes.api_deployment(
            ctx.name("deployment"), rest, stage_name=ctx.stack, after=[integration]
        )
    )

    graph.add(
        nodes.lambda_permission(
            f"{function_name}-permission",
            fn,
            nodes.APIGATEWAY_PRINCIPAL,
            Interpolation("{}/*/*", rest.output("execution_arn")),
        )
    )

    graph.export(
        API_URL_OUTPUT,
        nodes.invoke_url(deployment, api.path_part),
        description="URL to POST new todos to",
    )
    return graph


def build_from_config(config: Config, resolver: AccountResolver = None) -> Graph:
    return build_stack(
        config.context,
        resolver or AccountResolver(),
        function=config.function,
        api=config.api,
    )
