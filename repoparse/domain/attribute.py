"""
Attribute catalog for pacman repository databases.

Every `%TOKEN%` line in a desc block names an attribute. The catalog maps
each known token to the kind of value it carries and the canonical label
used as the field name in decoded records:

    'DEPENDS' -> AttributeSpec(kind=AttributeKind.ARRAY, label='Depends')

Catalogs are immutable values; extend() returns a new catalog instead of
modifying the existing one, so several format versions can coexist.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union


class AttributeKind(Enum):
    """How the value lines of an attribute are coerced."""
    STRING = "string"      # Single line, last line wins
    ARRAY = "array"        # One element per line, order and duplicates kept
    NUMERIC = "numeric"    # Single integer (or decimal) line


@dataclass(frozen=True)
class AttributeSpec:
    """Catalog entry: value kind and canonical label of one token."""
    kind: AttributeKind
    label: str

    @classmethod
    def coerce(cls, value: Union['AttributeSpec', tuple, list]) -> 'AttributeSpec':
        """
        Build a spec from a catalog entry as written in configuration.

        Accepts an AttributeSpec, or a (kind, label) pair where kind is an
        AttributeKind or its string value.
        """
        if isinstance(value, AttributeSpec):
            return value
        kind, label = value
        return cls(kind=AttributeKind(kind), label=str(label))


def fallback_label(token: str) -> str:
    """Label for a token missing from the catalog ('FOOBAR' -> 'Foobar')."""
    return token.lower().capitalize()


@dataclass(frozen=True)
class AttributeCatalog:
    """
    Read-only mapping from upper-case attribute token to AttributeSpec.

    Example:
        spec = DEFAULT_CATALOG.kind_and_label('CSIZE')
        spec.kind   # AttributeKind.NUMERIC
        spec.label  # 'CSize'
    """

    entries: Mapping[str, AttributeSpec] = field(default_factory=dict)

    def __post_init__(self):
        frozen = {token: AttributeSpec.coerce(spec) for token, spec in self.entries.items()}
        object.__setattr__(self, 'entries', MappingProxyType(frozen))

    def kind_and_label(self, token: str) -> Optional[AttributeSpec]:
        """Look up a token; None when the token is unknown."""
        return self.entries.get(token)

    def __contains__(self, token: str) -> bool:
        return token in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def list_tokens(self) -> List[str]:
        """All tokens, sorted."""
        return sorted(self.entries)

    def list_labels(self) -> List[str]:
        """All canonical labels, sorted lexicographically."""
        return sorted(spec.label for spec in self.entries.values())

    def token_for_label(self, label: str) -> Optional[str]:
        for token, spec in self.entries.items():
            if spec.label == label:
                return token
        return None

    def spec_for_label(self, label: str) -> Optional[AttributeSpec]:
        token = self.token_for_label(label)
        return self.entries[token] if token is not None else None

    def extend(self, extra: Mapping[str, Any]) -> 'AttributeCatalog':
        """
        Return a new catalog with entries added or replaced.

        Args:
            extra: Mapping of token to AttributeSpec or (kind, label) pair

        Returns:
            New AttributeCatalog; this catalog is left unchanged
        """
        merged: Dict[str, AttributeSpec] = dict(self.entries)
        for token, spec in extra.items():
            merged[token.upper()] = AttributeSpec.coerce(spec)
        return AttributeCatalog(merged)


# Labels match the AUR RPC field names where one exists, so decoded records
# can be fed to tools that consume AUR package data.
DEFAULT_CATALOG = AttributeCatalog({
    'ARCH':         AttributeSpec(AttributeKind.STRING,  'Arch'),
    'BASE':         AttributeSpec(AttributeKind.STRING,  'PackageBase'),
    'DESC':         AttributeSpec(AttributeKind.STRING,  'Description'),
    'FILENAME':     AttributeSpec(AttributeKind.STRING,  'FileName'),
    'MD5SUM':       AttributeSpec(AttributeKind.STRING,  'Md5Sum'),     # too large for int64
    'NAME':         AttributeSpec(AttributeKind.STRING,  'Name'),
    'PACKAGER':     AttributeSpec(AttributeKind.STRING,  'Packager'),
    'SHA256SUM':    AttributeSpec(AttributeKind.STRING,  'Sha256Sum'),  # too large for int64
    'URL':          AttributeSpec(AttributeKind.STRING,  'URL'),
    'VERSION':      AttributeSpec(AttributeKind.STRING,  'Version'),
    'PGPSIG':       AttributeSpec(AttributeKind.STRING,  'PgpSig'),
    'CONFLICTS':    AttributeSpec(AttributeKind.ARRAY,   'Conflicts'),
    'CHECKDEPENDS': AttributeSpec(AttributeKind.ARRAY,   'CheckDepends'),
    'DEPENDS':      AttributeSpec(AttributeKind.ARRAY,   'Depends'),
    'LICENSE':      AttributeSpec(AttributeKind.ARRAY,   'License'),
    'MAKEDEPENDS':  AttributeSpec(AttributeKind.ARRAY,   'MakeDepends'),
    'OPTDEPENDS':   AttributeSpec(AttributeKind.ARRAY,   'OptDepends'),
    'PROVIDES':     AttributeSpec(AttributeKind.ARRAY,   'Provides'),
    'REPLACES':     AttributeSpec(AttributeKind.ARRAY,   'Replaces'),
    'GROUPS':       AttributeSpec(AttributeKind.ARRAY,   'Groups'),
    'FILES':        AttributeSpec(AttributeKind.ARRAY,   'Files'),
    'BUILDDATE':    AttributeSpec(AttributeKind.NUMERIC, 'BuildDate'),
    'CSIZE':        AttributeSpec(AttributeKind.NUMERIC, 'CSize'),
    'ISIZE':        AttributeSpec(AttributeKind.NUMERIC, 'ISize'),
})
