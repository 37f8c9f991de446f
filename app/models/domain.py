"""
Domain models - recognition results and the annotation tree
"""
import math
from collections.abc import Mapping
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Named child collections of an annotation node, outermost first
CHILD_ROLES = ("pages", "blocks", "paragraphs", "words", "symbols")


class AnnotationNode(BaseModel):
    """
    One node of a recognized document hierarchy

    A page, block, paragraph, word or symbol. Every node may carry a
    confidence and any of the named child collections; a node with no
    children is a leaf.
    """
    model_config = ConfigDict(frozen=True)

    confidence: Optional[float] = Field(None, description="Provider confidence for this node")
    pages: List["AnnotationNode"] = Field(default_factory=list)
    blocks: List["AnnotationNode"] = Field(default_factory=list)
    paragraphs: List["AnnotationNode"] = Field(default_factory=list)
    words: List["AnnotationNode"] = Field(default_factory=list)
    symbols: List["AnnotationNode"] = Field(default_factory=list)

    def children(self) -> List["AnnotationNode"]:
        """All direct children across every named collection"""
        return [child for role in CHILD_ROLES for child in getattr(self, role)]

    @field_validator("confidence", mode="before")
    @classmethod
    def drop_non_finite_confidence(cls, value: Any) -> Optional[float]:
        """Only finite numbers count as a confidence"""
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not math.isfinite(value):
            return None
        return value

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["AnnotationNode"]:
        """
        Build a tree from loosely shaped provider data

        Anything that is not a mapping becomes ``None``. A child collection
        that is not a list counts as empty, and a confidence that is not a
        finite number is dropped.

        Args:
            raw: Decoded provider payload (dicts and lists)

        Returns:
            Root node, or None when ``raw`` is not a node at all
        """
        if isinstance(raw, AnnotationNode):
            return raw
        if not isinstance(raw, Mapping):
            return None

        children = {}
        for role in CHILD_ROLES:
            collection = raw.get(role)
            if not isinstance(collection, (list, tuple)):
                continue
            nodes = [cls.from_raw(item) for item in collection]
            children[role] = [node for node in nodes if node is not None]

        return cls(confidence=raw.get("confidence"), **children)


class ProcessedResult(BaseModel):
    """Reduced outcome of a single recognition call"""
    text: str = Field(..., description="Trimmed full text")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Mean confidence, 2 decimals")
    has_text: bool = Field(..., description="Whether any text was recognized")


class BatchItem(BaseModel):
    """One uploaded image of a batch"""
    filename: str
    content: bytes


class BatchItemResult(BaseModel):
    """Per-image entry of a batch response"""
    filename: str = Field(..., description="Original file name")
    success: bool = Field(..., description="Whether this image was recognized")
    text: Optional[str] = Field(None, description="Recognized text")
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0, description="Recognition confidence")
    error: Optional[str] = Field(None, description="Failure message")

    @classmethod
    def succeeded(cls, filename: str, result: ProcessedResult) -> "BatchItemResult":
        return cls(
            filename=filename,
            success=True,
            text=result.text,
            confidence=result.confidence
        )

    @classmethod
    def failed(cls, filename: str, error: str) -> "BatchItemResult":
        return cls(filename=filename, success=False, error=error)
