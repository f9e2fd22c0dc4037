"""
Record domain object for repoparse.

A Record is one decoded package entry of a repository database: the
attributes of its desc block plus the database path and repository name
it was read from. Records are immutable once the decoder hands them out.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional

# Labels of the two fields injected into every record
DB_PATH_LABEL = 'DBPath'
REPOSITORY_LABEL = 'Repository'


@dataclass(frozen=True)
class Record:
    """
    Immutable representation of one package entry.

    Attributes:
        db_path: Path of the database the entry was read from
        repository: Repository name the database belongs to
        attributes: Canonical label -> value (str, tuple of str, or number),
            in the order the attributes first appeared
    """

    db_path: str
    repository: str
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def __hash__(self) -> int:
        return hash((self.db_path, self.repository, tuple(self.attributes.items())))

    def get(self, label: str, default: Any = None) -> Any:
        """Value of a field by label, including the injected fields."""
        if label == DB_PATH_LABEL:
            return self.db_path
        if label == REPOSITORY_LABEL:
            return self.repository
        return self.attributes.get(label, default)

    def __getitem__(self, label: str) -> Any:
        if label in (DB_PATH_LABEL, REPOSITORY_LABEL) or label in self.attributes:
            return self.get(label)
        raise KeyError(label)

    def __contains__(self, label: str) -> bool:
        return label in (DB_PATH_LABEL, REPOSITORY_LABEL) or label in self.attributes

    def labels(self) -> Iterator[str]:
        yield DB_PATH_LABEL
        yield REPOSITORY_LABEL
        yield from self.attributes

    @property
    def name(self) -> Optional[str]:
        return self.attributes.get('Name')

    @property
    def version(self) -> Optional[str]:
        return self.attributes.get('Version')

    @property
    def filename(self) -> Optional[str]:
        return self.attributes.get('FileName')

    @property
    def base(self) -> Optional[str]:
        return self.attributes.get('PackageBase')

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-serializable dict.

        The injected fields come first, array values become lists.
        """
        result: Dict[str, Any] = {
            DB_PATH_LABEL: self.db_path,
            REPOSITORY_LABEL: self.repository,
        }
        for label, value in self.attributes.items():
            result[label] = list(value) if isinstance(value, tuple) else value
        return result
