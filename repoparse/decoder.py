"""
Stream decoder for pacman repository databases.

A repository database is a sequence of desc blocks:

    %FILENAME%
    foo-1.0-1-x86_64.pkg.tar.zst

    %NAME%
    foo

    %DEPENDS%
    bar
    baz

    %FILENAME%
    ...

There is no end-of-block marker. A record is only known to be complete
when the header attribute appears again or the input ends, so the decoder
always holds one pending record and hands it to the handler one header
late. The final record is always reported with is_last=True, with None in
place of the record when the search rejects it, so that handlers wrapping
their output (e.g. a JSON array) can close it.
"""

import logging
import math
import re
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Union

from .domain import (
    AttributeCatalog,
    AttributeKind,
    AttributeSpec,
    DEFAULT_CATALOG,
    Record,
    fallback_label,
)
from .exit_codes import MalformedStreamError, UnknownHeaderError
from .search import EntrySearch

logger = logging.getLogger(__name__)

# handler(record_or_None, count, is_last)
Handler = Callable[[Optional[Record], int, bool], None]

DEFAULT_HEADER = 'FILENAME'
DEFAULT_SEARCH_BY = 'Name'

_ATTRIBUTE_LINE = re.compile(r'^%(.+)%$')


def _chomp(line: str) -> str:
    return line.rstrip('\r\n')


def _coerce_number(row: str, lineno: int) -> Union[int, float]:
    try:
        return int(row)
    except ValueError:
        pass
    try:
        value = float(row)
    except ValueError:
        value = None
    # float() also accepts nan and inf
    if value is None or not math.isfinite(value):
        raise MalformedStreamError(f"numeric attribute has non-numeric value '{row}'", lineno)
    return value


class StreamDecoder:
    """
    Decoder turning desc text lines into Records.

    The catalog is fixed at construction; decode() keeps all of its state
    local, so one decoder can serve any number of independent streams.

    Example:
        decoder = StreamDecoder()
        with open('custom.desc') as f:
            count = decoder.decode(f, 'custom.db', 'custom', 'FILENAME', print_record)
    """

    def __init__(self, catalog: AttributeCatalog = DEFAULT_CATALOG):
        self.catalog = catalog

    def decode(
        self,
        lines: Iterable[str],
        db_path: str,
        db_name: str,
        header: str,
        handler: Handler,
        search: Optional[str] = None,
        search_by: str = DEFAULT_SEARCH_BY
    ) -> int:
        """
        Decode a database stream, running handler on each matching record.

        Args:
            lines: Text lines of the database (trailing newlines allowed)
            db_path: Database path stored in every record
            db_name: Repository name stored in every record
            header: Token whose reappearance starts a new record
            handler: Called as handler(record, count, is_last)
            search: Regular expression applied to the search_by field
            search_by: Label of the field the search is applied to

        Returns:
            The record counter after the last record (0 for an empty stream)

        Raises:
            UnknownHeaderError: header is not a string attribute of the catalog
            InvalidPatternError: search is not a valid regular expression
            MalformedStreamError: the input does not follow the desc layout
        """
        header_spec = self.catalog.kind_and_label(header)
        if header_spec is None or header_spec.kind is not AttributeKind.STRING:
            raise UnknownHeaderError(header)

        entry_search = EntrySearch(search, search_by, self.catalog)

        count = 0
        entry: Dict[str, Any] = {}
        header_value: Optional[str] = None
        attr_spec: Optional[AttributeSpec] = None
        lineno = 0

        rows = iter(lines)
        for line in rows:
            lineno += 1
            row = _chomp(line)
            match = _ATTRIBUTE_LINE.match(row)
            token = match.group(1) if match else None

            if token == header:
                value_line = next(rows, None)
                if value_line is not None:
                    lineno += 1
                header_value = _chomp(value_line) if value_line is not None else ''

                # The previous entry is complete now
                if count > 0:
                    record = self._freeze(entry, db_path, db_name)
                    if entry_search(record):
                        handler(record, count, False)
                        count += 1
                else:
                    count += 1

                entry = {header_spec.label: header_value}

            elif token is not None:
                if not header_value:
                    raise MalformedStreamError(f"attribute '{header}' not set", lineno)

                spec = self.catalog.kind_and_label(token)
                if spec is None:
                    logger.warning(f"unknown attribute '{token}' in {db_path}")
                    spec = AttributeSpec(AttributeKind.STRING, fallback_label(token))
                attr_spec = spec

            elif row == '':
                continue

            else:
                if attr_spec is None:
                    raise MalformedStreamError("value line before any attribute", lineno)
                self._assign(entry, attr_spec, row, lineno)

        if count == 0:
            logger.debug(f"no entries in {db_path}")
            return 0

        record = self._freeze(entry, db_path, db_name)
        if entry_search(record):
            handler(record, count, True)
        else:
            # Terminal call without a record so wrapped output can be closed
            handler(None, count, True)

        logger.debug(f"decoded {db_path}: count={count}")
        return count

    @staticmethod
    def _assign(entry: Dict[str, Any], spec: AttributeSpec, row: str, lineno: int) -> None:
        if spec.kind is AttributeKind.NUMERIC:
            entry[spec.label] = _coerce_number(row, lineno)
        elif spec.kind is AttributeKind.ARRAY:
            entry.setdefault(spec.label, []).append(row)
        else:
            entry[spec.label] = row

    @staticmethod
    def _freeze(entry: Dict[str, Any], db_path: str, db_name: str) -> Record:
        attributes = {
            label: tuple(value) if isinstance(value, list) else value
            for label, value in entry.items()
        }
        return Record(db_path=db_path, repository=db_name, attributes=attributes)

    def iter_records(
        self,
        lines: Iterable[str],
        db_path: str,
        db_name: str,
        header: str = DEFAULT_HEADER,
        search: Optional[str] = None,
        search_by: str = DEFAULT_SEARCH_BY
    ) -> Iterator[Record]:
        """
        Decode a whole stream and return an iterator over its matching records.

        Decoding happens before this returns, so decode errors are raised
        by the call itself rather than on first iteration.
        """
        records = []

        def collect(record: Optional[Record], count: int, is_last: bool) -> None:
            if record is not None:
                records.append(record)

        self.decode(lines, db_path, db_name, header, collect, search, search_by)
        return iter(records)


def parse_db(
    lines: Iterable[str],
    db_path: str,
    db_name: str,
    header: str,
    handler: Handler,
    search: Optional[str] = None,
    search_by: str = DEFAULT_SEARCH_BY,
    catalog: AttributeCatalog = DEFAULT_CATALOG
) -> int:
    """Decode a database stream with a one-off StreamDecoder."""
    return StreamDecoder(catalog).decode(lines, db_path, db_name, header, handler, search, search_by)
