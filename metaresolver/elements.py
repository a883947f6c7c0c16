"""Module containing supported declaration element types."""

from typing import Literal, TypeAlias

__all__ = (
    "ElementType",
    "TYPE",
    "METHOD",
    "ATTRIBUTE_KIND",
)

ElementType: TypeAlias = Literal["type", "method", "attribute_kind"]
TYPE: ElementType = "type"
METHOD: ElementType = "method"
ATTRIBUTE_KIND: ElementType = "attribute_kind"
