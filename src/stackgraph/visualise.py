"""Make a DOT visualisation of the resource graph"""

import logging

from graphviz import Digraph

from .graph import Graph

LOG = logging.getLogger(__name__)

C_CYAN = "#e0ffff"

NODE_STYLE = dict(shape="rectangle")
API_STYLE = dict(color=C_CYAN, style="filled", shape="rectangle")
IAM_STYLE = dict(shape="octagon")
DATA_EDGE_STYLE = dict()
EXPLICIT_EDGE_STYLE = dict(style="dashed", label="depends_on")


def get_node_style(kind: str) -> dict:
    if kind.startswith("aws_api_gateway"):
        return API_STYLE
    elif kind.startswith("aws_iam"):
        return IAM_STYLE
    else:
        return NODE_STYLE


def make_graph(graph: Graph) -> Digraph:
    """Edges point from a dependency to the nodes that need it"""
    dot = Digraph(comment=f"Resources for {graph.context.name()}")

    for node in graph.nodes:
        label = f"{node.kind}\n{node.name}"
        dot.node(node.address, label, **get_node_style(node.kind))

    for node in graph.nodes:
        referenced = [ref.node for ref in node.references()]
        for dep in graph.dependencies(node):
            if dep in referenced:
                dot.edge(dep.address, node.address, **DATA_EDGE_STYLE)
            else:
                dot.edge(dep.address, node.address, **EXPLICIT_EDGE_STYLE)

    LOG.info("Graph has %d nodes", len(graph))
    return dot
