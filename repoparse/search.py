"""
Entry search for repoparse.

Decides whether a decoded record is handed to the output handler. The
search expression is a regular expression matched anywhere in the value
(re.search semantics) of one designated field:

- scalar fields match when the expression matches the value
- array fields match when the expression matches any element
- numeric fields are matched through their string form

Without an expression, a record matches whenever the designated field is set.
"""

import re
from typing import Any, Optional

from .domain import AttributeCatalog, AttributeKind, DEFAULT_CATALOG, Record
from .exit_codes import InvalidPatternError


def compile_pattern(pattern: str) -> re.Pattern:
    """Compile a search expression, raising InvalidPatternError on bad syntax."""
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidPatternError(pattern, str(e)) from e


def matches(
    pattern: Optional[str],
    value: Any,
    kind: Optional[AttributeKind] = None
) -> bool:
    """
    Evaluate a search expression against one field value.

    Args:
        pattern: Regular expression, or None/'' to only test presence
        value: Field value (None when the field was never set)
        kind: Value kind of the field; derived from the value when omitted

    Returns:
        True if the record holding this value should be kept
    """
    if not pattern:
        return value is not None
    return _matches_compiled(compile_pattern(pattern), value, kind)


def _matches_compiled(regex: re.Pattern, value: Any, kind: Optional[AttributeKind]) -> bool:
    if value is None:
        return False

    if kind is None:
        kind = AttributeKind.ARRAY if isinstance(value, (tuple, list)) else AttributeKind.STRING

    if kind is AttributeKind.ARRAY:
        return any(regex.search(str(element)) for element in value)
    return regex.search(str(value)) is not None


class EntrySearch:
    """
    Search bound to one field, compiled once per decode call.

    Example:
        search = EntrySearch('^python-', 'Name')
        kept = [r for r in records if search(r)]
    """

    def __init__(
        self,
        pattern: Optional[str],
        label: str,
        catalog: AttributeCatalog = DEFAULT_CATALOG
    ):
        self.pattern = pattern or None
        self.label = label
        spec = catalog.spec_for_label(label)
        # Injected fields and attributes missing from the catalog are strings
        self.kind = spec.kind if spec else AttributeKind.STRING
        self._regex = compile_pattern(pattern) if pattern else None

    def __call__(self, record: Record) -> bool:
        value = record.get(self.label)
        if self._regex is None:
            return value is not None
        return _matches_compiled(self._regex, value, self.kind)

    def __repr__(self) -> str:
        return f"EntrySearch(pattern={self.pattern!r}, label={self.label!r})"
