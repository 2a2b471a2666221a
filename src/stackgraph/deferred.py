"""Values which are not known when a node is declared.

There are two sorts:

- Deferred: computed locally, later. Wraps a concurrent.futures.Future (e.g. the
  deployer identity lookup), and can be composed with `map`.

- OutputReference: an attribute of another node, only known once the
  reconciler has created it (e.g. an ARN). These are never resolved here -- they
  render to Terraform interpolation expressions, and they are the edges of the
  dependency graph.

Interpolation and Json combine either sort into strings. Nothing is evaluated
until `render` is called, so a graph of nodes can be inspected before any
asynchronous work finishes.
"""

import json
from collections.abc import Mapping
from concurrent.futures import Future
from typing import Any, Callable, Iterator


class Value:
    """Base for values which must be rendered before hand-off"""

    def render(self) -> Any:
        raise NotImplementedError

    def references(self) -> Iterator["OutputReference"]:
        return iter(())


class Deferred(Value):
    """A locally computed value, available once its future completes"""

    def __init__(self, future: Future = None, *, parent=None, fn: Callable = None):
        if (future is None) == (parent is None):
            raise ValueError("Deferred needs exactly one of future or parent")
        self.future = future
        self.parent = parent
        self.fn = fn
        self.resolved = False
        self.value = None

    @classmethod
    def of(cls, value) -> "Deferred":
        """A Deferred which is already resolved"""
        future = Future()
        future.set_result(value)
        return cls(future)

    def map(self, fn: Callable) -> "Deferred":
        """Chain FN onto this value. FN runs at most once, on first use."""
        return Deferred(parent=self, fn=fn)

    def result(self):
        """Get the value, blocking on the underlying future if necessary"""
        if not self.resolved:
            if self.parent is not None:
                self.value = self.fn(self.parent.result())
            else:
                self.value = self.future.result()
            self.resolved = True
        return self.value

    def render(self):
        return render(self.result())

    def __repr__(self):
        return f"<Deferred {id(self)} {self.resolved} ({self.value})>"


class OutputReference(Value):
    """A forward reference to an attribute of a declared node"""

    def __init__(self, node, attribute: str):
        self.node = node
        self.attribute = attribute

    @property
    def expression(self) -> str:
        return f"${{{self.node.address}.{self.attribute}}}"

    def render(self) -> str:
        return self.expression

    def references(self):
        yield self

    def __eq__(self, other):
        return (
            isinstance(other, OutputReference)
            and self.node.address == other.node.address
            and self.attribute == other.attribute
        )

    def __hash__(self):
        return hash((self.node.address, self.attribute))

    def __repr__(self):
        return f"<OutputReference {self.node.address}.{self.attribute}>"


class Interpolation(Value):
    """A str.format template over other values.

    e.g. Interpolation("{}/*/*", api.output("execution_arn"))
    """

    def __init__(self, template: str, *values):
        self.template = template
        self.values = values

    def render(self) -> str:
        return self.template.format(*[render(v) for v in self.values])

    def references(self):
        for v in self.values:
            yield from find_references(v)

    def __repr__(self):
        return f"<Interpolation {self.template!r}>"


class Json(Value):
    """A document which is handed over as a JSON string (e.g. IAM policies)"""

    def __init__(self, document):
        self.document = document

    def render(self) -> str:
        return json.dumps(render(self.document))

    def references(self):
        return find_references(self.document)


def render(obj):
    """Recursively replace every Value in OBJ by its rendered form"""
    if isinstance(obj, Value):
        return obj.render()
    elif isinstance(obj, Mapping):
        return {k: render(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [render(v) for v in obj]
    else:
        return obj


def find_references(obj) -> Iterator[OutputReference]:
    """Yield every OutputReference in OBJ, in order"""
    if isinstance(obj, Value):
        yield from obj.references()
    elif isinstance(obj, Mapping):
        for v in obj.values():
            yield from find_references(v)
    elif isinstance(obj, (list, tuple)):
        for v in obj:
            yield from find_references(v)
