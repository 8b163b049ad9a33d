from __future__ import annotations

import re
from collections.abc import Callable, Sequence

from formulation_intake.ingestion.errors import MissingRequiredColumn
from formulation_intake.models.ingredient import CanonicalField, HeaderMapping

"""Header resolution: raw sheet headers -> HeaderMapping.

Each canonical field is resolved independently. Headers are scanned in column
order and the first one accepted by the field's matcher wins, so a repeated
header resolves to its first occurrence.
"""

__all__ = [
    "resolve_headers",
    "match_header",
]

HeaderMatcher = Callable[[str], bool]


def _pattern(regex: str) -> HeaderMatcher:
    compiled = re.compile(regex, re.IGNORECASE)
    return lambda header: compiled.search(header) is not None


def _equals(word: str) -> HeaderMatcher:
    return lambda header: header.lower() == word


_MATCHERS: dict[CanonicalField, tuple[HeaderMatcher, ...]] = {
    CanonicalField.INCI_NAME: (_pattern(r"inci.*name"), _equals("ingredient")),
    CanonicalField.CAS_NUMBER: (_pattern(r"cas.*number"), _equals("cas")),
    CanonicalField.CONCENTRATION: (_pattern(r"concentration"), _pattern(r"percentage"), _pattern(r"%")),
    CanonicalField.FUNCTION: (_pattern(r"function"), _pattern(r"purpose"), _pattern(r"role")),
}


def match_header(canonical: CanonicalField, headers: Sequence[str]) -> str | None:
    """Return the first header accepted by any matcher of canonical, or None."""
    matchers = _MATCHERS[canonical]
    for header in headers:
        if any(m(header) for m in matchers):
            return header
    return None


def resolve_headers(headers: Sequence[str]) -> HeaderMapping:
    """Resolve a header row onto the canonical ingredient fields.

    Raises MissingRequiredColumn when inci_name or concentration has no match
    (inci_name is checked first).
    """
    resolved = {canonical: match_header(canonical, headers) for canonical in CanonicalField}
    for canonical in CanonicalField:
        if canonical.required and resolved[canonical] is None:
            raise MissingRequiredColumn(canonical.value)
    return HeaderMapping(
        inci_name=resolved[CanonicalField.INCI_NAME],  # type: ignore[arg-type]
        concentration=resolved[CanonicalField.CONCENTRATION],  # type: ignore[arg-type]
        cas_number=resolved[CanonicalField.CAS_NUMBER],
        function=resolved[CanonicalField.FUNCTION],
    )
