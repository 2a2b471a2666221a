"""Resource nodes: one declared provider resource each.

The node kinds are Terraform AWS provider resource types, and the inputs are
the resource arguments. Constructors here only fill in the fixed parts of each
resource -- wiring between nodes is done in stack.py.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Tuple

from .deferred import Interpolation, Json, OutputReference, find_references

LAMBDA_PRINCIPAL = "lambda.amazonaws.com"
APIGATEWAY_PRINCIPAL = "apigateway.amazonaws.com"

POLICY_VERSION = "2012-10-17"

LOG_ACTIONS = ["logs:CreateLogGroup", "logs:CreateLogStream", "logs:PutLogEvents"]
TABLE_ITEM_ACTIONS = [
    "dynamodb:Query",
    "dynamodb:Scan",
    "dynamodb:GetItem",
    "dynamodb:PutItem",
    "dynamodb:UpdateItem",
    "dynamodb:DeleteItem",
]

# Provisioned throughput for the table. Fixed; there is no scaling policy.
TABLE_CAPACITY_UNITS = 1


@dataclass(frozen=True, eq=False)
class ResourceNode:
    """One provider resource. Never modified after it is declared."""

    kind: str
    name: str
    inputs: Mapping = field(default_factory=dict)
    depends_on: Tuple["ResourceNode", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "inputs", MappingProxyType(dict(self.inputs)))
        object.__setattr__(self, "depends_on", tuple(self.depends_on))

    @property
    def address(self) -> str:
        return f"{self.kind}.{self.name}"

    def output(self, attribute: str) -> OutputReference:
        """Reference an attribute of this resource, known after it's created"""
        return OutputReference(self, attribute)

    def references(self) -> List[OutputReference]:
        return list(find_references(self.inputs))

    def __repr__(self):
        return f"<ResourceNode {self.address}>"


def policy_document(*statements) -> Json:
    return Json({"Version": POLICY_VERSION, "Statement": list(statements)})


def allow(actions, resource) -> dict:
    return {"Effect": "Allow", "Action": list(actions), "Resource": resource}


def assume_role_policy(service: str) -> Json:
    """Trust policy letting exactly one service principal assume the role"""
    return policy_document(
        {
            "Effect": "Allow",
            "Principal": {"Service": service},
            "Action": "sts:AssumeRole",
        }
    )


################################################################################
# Storage and identity


def table(name: str, hash_key: str = "id", tags: dict = None) -> ResourceNode:
    # https://registry.terraform.io/providers/hashicorp/aws/latest/docs/resources/dynamodb_table
    return ResourceNode(
        "aws_dynamodb_table",
        name,
        dict(
            name=name,
            hash_key=hash_key,
            attribute=[dict(name=hash_key, type="S")],
            billing_mode="PROVISIONED",
            read_capacity=TABLE_CAPACITY_UNITS,
            write_capacity=TABLE_CAPACITY_UNITS,
            tags=dict(tags or {}),
        ),
    )


def role(name: str, service: str = LAMBDA_PRINCIPAL, tags: dict = None) -> ResourceNode:
    return ResourceNode(
        "aws_iam_role",
        name,
        dict(
            name=name,
            assume_role_policy=assume_role_policy(service),
            tags=dict(tags or {}),
        ),
    )


def role_policy(name: str, role_node: ResourceNode, policy: Json) -> ResourceNode:
    return ResourceNode(
        "aws_iam_role_policy",
        name,
        dict(name=name, role=role_node.output("id"), policy=policy),
    )


################################################################################
# Functions


def layer_version(name: str, archive: str, runtimes: list) -> ResourceNode:
    return ResourceNode(
        "aws_lambda_layer_version",
        name,
        dict(
            layer_name=name,
            filename=str(archive),
            source_code_hash=f'${{filebase64sha256("{archive}")}}',
            compatible_runtimes=list(runtimes),
        ),
    )


def function(
    name: str,
    role_arn: OutputReference,
    archive: str,
    *,
    runtime: str,
    handler: str,
    memory: int,
    layers: list = (),
    environment: dict = None,
    tags: dict = None,
) -> ResourceNode:
    inputs = dict(
        function_name=name,
        role=role_arn,
        runtime=runtime,
        handler=handler,
        memory_size=memory,
        filename=str(archive),
        source_code_hash=f'${{filebase64sha256("{archive}")}}',
        layers=list(layers),
        tags=dict(tags or {}),
    )
    if environment:
        inputs["environment"] = dict(variables=dict(environment))
    return ResourceNode("aws_lambda_function", name, inputs)


def lambda_permission(
    name: str, function_node: ResourceNode, principal: str, source_arn
) -> ResourceNode:
    return ResourceNode(
        "aws_lambda_permission",
        name,
        dict(
            statement_id="AllowAPIGatewayInvoke",
            action="lambda:InvokeFunction",
            function_name=function_node.output("function_name"),
            principal=principal,
            source_arn=source_arn,
        ),
    )


################################################################################
# REST API
#
# rest_api -> resource -> method -> integration -> deployment (stage)


def rest_api(name: str) -> ResourceNode:
    return ResourceNode("aws_api_gateway_rest_api", name, dict(name=name))


def api_resource(name: str, api: ResourceNode, path_part: str) -> ResourceNode:
    return ResourceNode(
        "aws_api_gateway_resource",
        name,
        dict(
            rest_api_id=api.output("id"),
            parent_id=api.output("root_resource_id"),
            path_part=path_part,
        ),
    )


def api_method(
    name: str, api: ResourceNode, resource: ResourceNode, http_method: str
) -> ResourceNode:
    return ResourceNode(
        "aws_api_gateway_method",
        name,
        dict(
            rest_api_id=api.output("id"),
            resource_id=resource.output("id"),
            http_method=http_method,
            authorization="NONE",
        ),
    )


def proxy_integration(
    name: str,
    api: ResourceNode,
    resource: ResourceNode,
    method: ResourceNode,
    function_node: ResourceNode,
) -> ResourceNode:
    """Forward the whole request to the function, and return its response"""
    return ResourceNode(
        "aws_api_gateway_integration",
        name,
        dict(
            rest_api_id=api.output("id"),
            resource_id=resource.output("id"),
            http_method=method.output("http_method"),
            # Lambda proxy integrations are always invoked with POST
            integration_http_method="POST",
            type="AWS_PROXY",
            uri=function_node.output("invoke_arn"),
        ),
    )


def api_deployment(
    name: str, api: ResourceNode, stage_name: str, after: List[ResourceNode]
) -> ResourceNode:
    # The deployment must wait for the integrations, but doesn't reference them.
    # https://registry.terraform.io/providers/hashicorp/aws/latest/docs/resources/api_gateway_deployment
    return ResourceNode(
        "aws_api_gateway_deployment",
        name,
        dict(rest_api_id=api.output("id"), stage_name=stage_name),
        depends_on=tuple(after),
    )


def invoke_url(deployment: ResourceNode, path: str) -> Interpolation:
    """Public URL of PATH under the deployed stage"""
    return Interpolation("{}/{}", deployment.output("invoke_url"), path)
