"""
Domain layer for repoparse.

Contains pure domain objects with no I/O or side effects:
- AttributeCatalog: Known desc attributes, their value kinds and labels
- Record: One decoded package entry of a repository database

These objects are immutable and provide serialization methods for
JSON output.
"""

from .attribute import (
    AttributeKind,
    AttributeSpec,
    AttributeCatalog,
    DEFAULT_CATALOG,
    fallback_label,
)
from .record import Record, DB_PATH_LABEL, REPOSITORY_LABEL

__all__ = [
    'AttributeKind',
    'AttributeSpec',
    'AttributeCatalog',
    'DEFAULT_CATALOG',
    'fallback_label',
    'Record',
    'DB_PATH_LABEL',
    'REPOSITORY_LABEL',
]
