# terrain_graph/nodegraph/node_info.py
from __future__ import annotations
from typing import Any, Dict

from .errors import GraphFormatError
from .model import Graph


def describe_node(graph: Graph, node_id: str) -> Dict[str, Any]:
    """Сводка по ноде для панели свойств: порты и сколько соединений использовано."""
    node = graph.node(node_id)
    if node is None:
        raise GraphFormatError(f"Node '{node_id}' not found")
    return {
        "id": node.id,
        "title": node.title,
        "kind": node.kind,
        "params": node.op.params(),
        "inputs": [p.label or p.id for p in node.inputs],
        "outputs": [p.label or p.id for p in node.outputs],
        "inputs_used": len(graph.incoming(node_id)),
        "outputs_used": len(graph.outgoing(node_id)),
    }
