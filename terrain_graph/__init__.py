from .nodegraph import (
    CancelToken, EvaluationCancelled, Graph, GraphFormatError, Heightmap,
    InvalidDimensionsError, evaluate, graph_from_dict,
)

__version__ = "0.1.0"

__all__ = [
    "CancelToken",
    "EvaluationCancelled",
    "Graph",
    "GraphFormatError",
    "Heightmap",
    "InvalidDimensionsError",
    "evaluate",
    "graph_from_dict",
]
