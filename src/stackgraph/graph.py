"""Assemble resource nodes into a dependency graph"""

import logging
from dataclasses import dataclass
from graphlib import CycleError, TopologicalSorter
from typing import Dict, List, Tuple

from .deferred import find_references, render
from .exceptions import DeclarationError
from .naming import StackContext
from .nodes import ResourceNode

LOG = logging.getLogger(__name__)


@dataclass
class Manifest:
    """A finalised graph: plain data, ready to hand to the reconciler"""

    stack: str
    project: str
    providers: Dict[str, dict]
    resources: Dict[str, Dict[str, dict]]
    outputs: Dict[str, dict]


class Graph:
    """Nodes plus the edges between them.

    Nodes must be added in dependency order: anything a node references (or
    explicitly depends on) has to be in the graph already. That's checked when
    the node is added, so a bad graph fails at declaration time.
    """

    def __init__(self, context: StackContext):
        self.context = context
        self.providers = {}
        self.outputs = {}
        self._nodes: Dict[str, ResourceNode] = {}

    @property
    def nodes(self) -> List[ResourceNode]:
        return list(self._nodes.values())

    def __contains__(self, node: ResourceNode) -> bool:
        return self._nodes.get(node.address) is node

    def __len__(self):
        return len(self._nodes)

    def get(self, address: str) -> ResourceNode:
        return self._nodes[address]

    def _check_declared(self, source: str, node: ResourceNode):
        if node not in self:
            raise DeclarationError(
                f"{source} depends on {node.address}, which has not been declared"
            )

    def add(self, node: ResourceNode) -> ResourceNode:
        """Declare NODE, returning it"""
        if node.address in self._nodes:
            raise DeclarationError(f"{node.address} is already declared")

        for dep in self.dependencies(node):
            self._check_declared(node.address, dep)

        self._nodes[node.address] = node
        LOG.debug("Declared %s", node.address)
        return node

    def dependencies(self, node: ResourceNode) -> List[ResourceNode]:
        """Data references first, then explicit depends_on, without repeats"""
        deps = []
        for item in [ref.node for ref in node.references()] + list(node.depends_on):
            if item not in deps:
                deps.append(item)
        return deps

    def edges(self) -> List[Tuple[ResourceNode, ResourceNode]]:
        return [(n, d) for n in self.nodes for d in self.dependencies(n)]

    def configure_provider(self, name: str, **settings):
        self.providers[name] = settings

    def export(self, name: str, value, description: str = None):
        """Add a named output for the reconciler (and whoever runs it)"""
        if name in self.outputs:
            raise DeclarationError(f"Output {name} is already declared")
        for ref in find_references(value):
            self._check_declared(f"Output {name}", ref.node)
        self.outputs[name] = dict(value=value)
        if description:
            self.outputs[name]["description"] = description

    def topological_order(self) -> List[ResourceNode]:
        """Dependencies before dependents, otherwise in declaration order"""
        position = {addr: idx for idx, addr in enumerate(self._nodes)}
        sorter = TopologicalSorter()
        for node in self.nodes:
            sorter.add(node.address, *[d.address for d in self.dependencies(node)])

        order = []
        try:
            sorter.prepare()
        except CycleError as exc:
            cycle = " -> ".join(exc.args[1])
            raise DeclarationError(f"Dependency cycle: {cycle}") from exc

        while sorter.is_active():
            ready = sorted(sorter.get_ready(), key=position.__getitem__)
            order.extend(ready)
            sorter.done(*ready)

        return [self._nodes[addr] for addr in order]

    def validate(self):
        for node in self.nodes:
            for dep in self.dependencies(node):
                self._check_declared(node.address, dep)
        self.topological_order()

    def finalise(self) -> Manifest:
        """Validate the graph and resolve every locally deferred value.

        This blocks until the deployer identity (if used) is resolved, and any
        failure to resolve it propagates: there's no partial graph.
        """
        self.validate()
        LOG.info("Finalising %d nodes", len(self))

        resources = {}
        for node in self.nodes:
            resources.setdefault(node.kind, {})[node.name] = self._render_node(node)

        return Manifest(
            stack=self.context.stack,
            project=self.context.project,
            providers=render(self.providers),
            resources=resources,
            outputs=render(self.outputs),
        )

    @staticmethod
    def _render_node(node: ResourceNode) -> dict:
        inputs = render(node.inputs)
        if node.depends_on:
            inputs["depends_on"] = [d.address for d in node.depends_on]
        return inputs
