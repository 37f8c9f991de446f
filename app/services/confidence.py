"""
Confidence aggregation over an annotation tree
"""
from typing import Any, Iterator, List, Optional, Union

from app.models.domain import AnnotationNode

Tree = Union[AnnotationNode, dict, None]


def iter_confidences(node: Optional[AnnotationNode]) -> Iterator[float]:
    """
    Yield every confidence in the tree, depth first

    The node itself comes before its children, children follow the
    pages -> symbols role order.
    """
    if node is None:
        return
    if node.confidence is not None:
        yield node.confidence
    for child in node.children():
        yield from iter_confidences(child)


def aggregate(tree: Tree) -> float:
    """
    Mean of all confidences found anywhere in the tree

    Nodes at every depth count equally, a page weighs as much as a symbol.

    Args:
        tree: Root node, a raw provider mapping, or None

    Returns:
        Arithmetic mean, 0.0 if the tree is absent or carries no confidence
    """
    root = AnnotationNode.from_raw(tree)
    values: List[float] = list(iter_confidences(root))
    if not values:
        return 0.0
    return sum(values) / len(values)


def round_confidence(confidence: Any) -> float:
    """Round a confidence to 2 decimal places"""
    return round(float(confidence), 2)
