# ========================
# file: terrain_graph/nodegraph/__init__.py
# ========================
from .cancel import CancelToken
from .errors import EvaluationCancelled, GraphError, GraphFormatError, InvalidDimensionsError
from .heightmap import Heightmap
from .loader import graph_from_dict, graph_to_dict
from .model import (
    AddOp, ClampOp, Connection, Endpoint, Graph, MultiplyOp, Node, NoiseOp,
    OutputOp, Port, UnknownOp, make_operator,
)
from .planner import EvaluationPlan, plan_evaluation
from .runner import evaluate

__all__ = [
    "AddOp",
    "CancelToken",
    "ClampOp",
    "Connection",
    "Endpoint",
    "EvaluationCancelled",
    "EvaluationPlan",
    "Graph",
    "GraphError",
    "GraphFormatError",
    "Heightmap",
    "InvalidDimensionsError",
    "MultiplyOp",
    "Node",
    "NoiseOp",
    "OutputOp",
    "Port",
    "UnknownOp",
    "evaluate",
    "graph_from_dict",
    "graph_to_dict",
    "make_operator",
    "plan_evaluation",
]
