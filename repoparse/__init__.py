"""
repoparse - Decoder for pacman repository databases.

repoparse reads the desc entries of a pacman repository database
(`repo-add` output) and turns them into structured package records.

Quick Start:
    from repoparse import parse_db, open_database

    def show(record, count, is_last):
        if record is not None:
            print(count, record.name, record.version)

    parse_db(open_database("custom.db"), "custom.db", "custom", "FILENAME", show)

    # Only packages whose Depends match a regular expression
    parse_db(lines, "custom.db", "custom", "FILENAME", show,
             search="^python", search_by="Depends")

Domain Objects:
    Record - One package entry with its attributes
    AttributeCatalog - Known desc attributes, value kinds and labels

Handlers:
    JsonHandler, JsonLinesHandler, ListHandler, AttributeHandler,
    DescHandler, TableHandler
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    AttributeKind,
    AttributeSpec,
    AttributeCatalog,
    DEFAULT_CATALOG,
    Record,
)

# Decoding
from .decoder import StreamDecoder, parse_db
from .search import EntrySearch, matches
from .encoder import encode_record, encode_records
from .infra import open_database, database_name

# Errors
from .exit_codes import (
    CommandError,
    DecodeError,
    MalformedStreamError,
    UnknownHeaderError,
    InvalidPatternError,
)

# Configuration
from .config import load_config, catalog_from_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "AttributeKind",
    "AttributeSpec",
    "AttributeCatalog",
    "DEFAULT_CATALOG",
    "Record",
    # Decoding
    "StreamDecoder",
    "parse_db",
    "EntrySearch",
    "matches",
    "encode_record",
    "encode_records",
    "open_database",
    "database_name",
    # Errors
    "CommandError",
    "DecodeError",
    "MalformedStreamError",
    "UnknownHeaderError",
    "InvalidPatternError",
    # Configuration
    "load_config",
    "catalog_from_config",
]
