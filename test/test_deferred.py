import json
from concurrent.futures import Future
from types import MappingProxyType

import pytest

from stackgraph.deferred import (
    Deferred,
    Interpolation,
    Json,
    OutputReference,
    find_references,
    render,
)
from stackgraph.nodes import ResourceNode


def test_map_is_lazy_and_runs_once():
    calls = []

    def double(x):
        calls.append(x)
        return x * 2

    future = Future()
    doubled = Deferred(future).map(double)
    assert not calls

    future.set_result(21)
    assert doubled.result() == 42
    assert doubled.result() == 42
    assert calls == [21]


def test_map_chains():
    d = Deferred.of("abc").map(str.upper).map(lambda s: s + "!")
    assert d.render() == "ABC!"
    assert d.resolved


def test_unresolved():
    d = Deferred(Future()).map(str.upper)
    assert not d.resolved
    assert d.value is None


def test_errors_propagate():
    future = Future()
    future.set_exception(RuntimeError("nope"))
    d = Deferred(future).map(lambda x: x)
    with pytest.raises(RuntimeError):
        d.result()


def test_needs_a_source():
    with pytest.raises(ValueError):
        Deferred()


def test_output_reference():
    node = ResourceNode("aws_iam_role", "dev-todos-executionRole")
    ref = node.output("arn")
    assert ref.render() == "${aws_iam_role.dev-todos-executionRole.arn}"
    assert ref == OutputReference(node, "arn")
    assert list(find_references(ref)) == [ref]


def test_interpolation():
    api = ResourceNode("aws_api_gateway_rest_api", "dev-todos-rest")
    value = Interpolation("{}/*/*", api.output("execution_arn"))
    assert value.render() == "${aws_api_gateway_rest_api.dev-todos-rest.execution_arn}/*/*"
    assert [r.node for r in find_references(value)] == [api]


def test_interpolation_with_deferred():
    value = Interpolation("{}:{}", Deferred.of("eu-west-2"), "x")
    assert value.render() == "eu-west-2:x"


def test_json_document():
    node = ResourceNode("aws_dynamodb_table", "dev-todos")
    doc = Json({"Resource": [node.output("arn"), Deferred.of("arn:aws:x")]})
    assert json.loads(doc.render()) == {
        "Resource": ["${aws_dynamodb_table.dev-todos.arn}", "arn:aws:x"]
    }
    assert len(list(find_references(doc))) == 1


def test_render_nested():
    node = ResourceNode("aws_lambda_function", "f")
    data = MappingProxyType(
        {"a": [node.output("arn"), {"b": Deferred.of(1)}], "c": ("x", 2)}
    )
    assert render(data) == {"a": ["${aws_lambda_function.f.arn}", {"b": 1}], "c": ["x", 2]}
