import pytest

from stackgraph.exceptions import ConfigError
from stackgraph.naming import StackContext, name
from stackgraph.stack import build_stack


@pytest.mark.parametrize(
    "stack,project", [("dev", "todos"), ("prod", "todos"), ("feature-x", "api")]
)
def test_name(stack, project):
    assert name(stack, project) == f"{stack}-{project}"
    assert name(stack, project, "x") == f"{stack}-{project}-x"


def test_context_names():
    ctx = StackContext("dev", "todos")
    assert ctx.name() == "dev-todos"
    assert ctx.name("createTodo") == "dev-todos-createTodo"
    assert ctx.name("executionRole") == "dev-todos-executionRole"
    assert ctx.tags == {"Environment": "dev"}


@pytest.mark.parametrize(
    "stack,project",
    [
        ("", "todos"),
        ("dev", ""),
        (None, "x"),
        ("my stack", "todos"),
        ("a.b", "todos"),
        ("1dev", "todos"),
        ("dev/x", "todos"),
        ("dev", "to dos"),
    ],
)
def test_bad_names_fail_fast(stack, project):
    with pytest.raises(ConfigError):
        name(stack, project)
    with pytest.raises(ConfigError):
        StackContext(stack, project)


def test_distinct_logical_names_dont_collide():
    logical = ["rest", "resource", "method", "deployment", "createTodo"]
    assert len({name("dev", "todos", l) for l in logical}) == len(logical)


@pytest.mark.parametrize("stack", ["my stack", "a.b", "1dev", "dev/x"])
def test_bad_stack_stops_the_build(stack, resolver):
    with pytest.raises(ConfigError):
        build_stack(StackContext(stack, "todos"), resolver)
