"""Template parser: split a path template into literal text and placeholder groups.

Syntax:

* ``%identifier`` is a placeholder; the identifier is the longest run of
  alphanumeric or underscore characters after the ``%``.
* ``{alt1|alt2|...}`` is a fallback group. Alternatives are tried left to
  right; inside a segment every ``%identifier`` is its own alternative and so
  is the plain text between them.
* Anything else is copied through unchanged.

Parsing never fails. An unterminated ``{`` runs to the end of the template and
constructs that yield no alternative (``{}``, a lone ``%``) stay literal text.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple, Union

from .placeholders import AlternativeToken, TemplateRequirements, classify


@dataclass(frozen=True)
class Literal:
    text: str

    @property
    def raw_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class PlaceholderGroup:
    raw_text: str
    alternatives: Tuple[AlternativeToken, ...]

    @property
    def has_literal(self) -> bool:
        return any(token.is_literal for token in self.alternatives)


TemplateSpan = Union[Literal, PlaceholderGroup]


@dataclass(frozen=True)
class ParsedTemplate:
    """Immutable result of `parse_template`."""

    template: str
    spans: Tuple[TemplateSpan, ...]
    requirements: TemplateRequirements = field(default_factory=TemplateRequirements)

    @property
    def groups(self) -> List[PlaceholderGroup]:
        return [span for span in self.spans if isinstance(span, PlaceholderGroup)]

    def unique_groups(self) -> List[PlaceholderGroup]:
        """Groups deduplicated by raw text, in first-seen order."""
        seen: Dict[str, PlaceholderGroup] = {}
        for group in self.groups:
            seen.setdefault(group.raw_text, group)
        return list(seen.values())

    def placeholder_map(self) -> Dict[str, List[str]]:
        """Map each group's raw text to its ordered alternative strings."""
        return {
            group.raw_text: [token.raw for token in group.alternatives]
            for group in self.unique_groups()
        }

    def reconstruct(self) -> str:
        return "".join(span.raw_text for span in self.spans)


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _identifier_end(text: str, start: int) -> int:
    """Index one past the identifier starting at `start` (after the '%')."""
    end = start
    while end < len(text) and _is_word_char(text[end]):
        end += 1
    return end


def _split_segment(segment: str) -> List[str]:
    parts: List[str] = []
    literal_start = 0
    i = 0
    while i < len(segment):
        if segment[i] == "%":
            end = _identifier_end(segment, i + 1)
            if end > i + 1:
                if i > literal_start:
                    parts.append(segment[literal_start:i])
                parts.append(segment[i:end])
                literal_start = i = end
                continue
        i += 1
    if literal_start < len(segment):
        parts.append(segment[literal_start:])
    return parts


def split_alternatives(body: str) -> List[str]:
    """Split the inside of a ``{...}`` group into its ordered alternatives."""
    segments = body.split("|")
    last = len(segments) - 1
    alternatives: List[str] = []
    for index, segment in enumerate(segments):
        if not segment:
            # only a trailing empty segment means "fall back to nothing"
            if index == last and index > 0:
                alternatives.append("")
            continue
        alternatives.extend(_split_segment(segment))
    return alternatives


def parse_template(template: str) -> ParsedTemplate:
    spans: List[TemplateSpan] = []
    literal: List[str] = []

    def flush_literal():
        if literal:
            spans.append(Literal("".join(literal)))
            literal.clear()

    i = 0
    n = len(template)
    while i < n:
        ch = template[i]
        if ch == "%":
            end = _identifier_end(template, i + 1)
            if end > i + 1:
                flush_literal()
                raw = template[i:end]
                spans.append(PlaceholderGroup(raw, (classify(raw),)))
                i = end
                continue
        elif ch == "{":
            close = template.find("}", i + 1)
            end = n if close == -1 else close + 1
            body_end = n if close == -1 else close
            alternatives = split_alternatives(template[i + 1:body_end])
            if alternatives:
                flush_literal()
                spans.append(
                    PlaceholderGroup(template[i:end], tuple(classify(a) for a in alternatives))
                )
            else:
                literal.append(template[i:end])
            i = end
            continue
        literal.append(ch)
        i += 1
    flush_literal()

    tokens = [token for span in spans if isinstance(span, PlaceholderGroup) for token in span.alternatives]
    return ParsedTemplate(
        template=template,
        spans=tuple(spans),
        requirements=TemplateRequirements.from_tokens(tokens),
    )


def parse_placeholders(template: str) -> Dict[str, List[str]]:
    """Shortcut for ``parse_template(template).placeholder_map()``."""
    return parse_template(template).placeholder_map()
