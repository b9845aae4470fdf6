# ========================
# file: terrain_graph/nodegraph/errors.py
# ========================
class GraphError(Exception):
    """Base error for the node graph engine."""


class GraphFormatError(GraphError):
    """Raised when a graph description cannot be turned into a snapshot."""


class InvalidDimensionsError(GraphError, ValueError):
    """Raised when the requested heightmap width/height is not a positive integer."""


class EvaluationCancelled(GraphError):
    """Raised when an evaluation is abandoned through its cancel token."""
