"""Template parsing and placeholder classification."""

from .parser import Literal, ParsedTemplate, PlaceholderGroup, parse_placeholders, parse_template
from .placeholders import (
    AlternativeToken,
    Category,
    PLACEHOLDERS,
    PlaceholderKind,
    TemplateRequirements,
    classify,
    fallback_label,
)

__all__ = [
    "AlternativeToken",
    "Category",
    "Literal",
    "PLACEHOLDERS",
    "ParsedTemplate",
    "PlaceholderGroup",
    "PlaceholderKind",
    "TemplateRequirements",
    "classify",
    "fallback_label",
    "parse_placeholders",
    "parse_template",
]
