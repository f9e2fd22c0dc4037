"""
Output module for repoparse.

Record handlers are called by the decoder as handler(record, count, is_last).
The record is None on the terminal call when the last entry was rejected by
the search, so every handler must accept None. Formats:

- JSON: a single JSON array, closed on the terminal call
- JSONL: one JSON object per record
- List: name and version per record
- Attribute: the values of one attribute
- Desc: records written back as desc blocks
- Table: human-readable table using Rich

Usage:
    from repoparse.output import JsonHandler, emit_error

    handler = JsonHandler()
    parse_db(lines, path, name, 'FILENAME', handler)
"""

import json
import sys
from typing import Any, Dict, List, Optional, TextIO

from rich.console import Console
from rich.table import Table

from .domain import AttributeCatalog, DEFAULT_CATALOG, Record
from .encoder import encode_record


class RecordHandler:
    """
    Base class for output handlers.

    Subclasses implement handle() for each record and finish() for the
    terminal call. `finished` tells callers whether the terminal call has
    happened, e.g. when no database produced any entry.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream
        self.finished = False
        self.emitted = 0

    @property
    def stream(self) -> TextIO:
        # Resolved late so redirected stdout is picked up
        return self._stream or sys.stdout

    def __call__(self, record: Optional[Record], count: int, is_last: bool) -> None:
        if record is not None:
            self.handle(record)
            self.emitted += 1
        if is_last and not self.finished:
            self.finished = True
            self.finish()
            self.stream.flush()

    def handle(self, record: Record) -> None:
        raise NotImplementedError

    def finish(self) -> None:
        pass


class JsonHandler(RecordHandler):
    """Stream records as one JSON array."""

    def __init__(self, stream: Optional[TextIO] = None, indent: Optional[int] = None):
        super().__init__(stream)
        self.indent = indent

    def handle(self, record: Record) -> None:
        self.stream.write(',\n' if self.emitted else '[\n')
        self.stream.write(json.dumps(record.to_dict(), ensure_ascii=False, indent=self.indent))

    def finish(self) -> None:
        self.stream.write('\n]\n' if self.emitted else '[]\n')


class JsonLinesHandler(RecordHandler):
    """Emit records as JSONL."""

    def handle(self, record: Record) -> None:
        print(json.dumps(record.to_dict(), ensure_ascii=False), file=self.stream, flush=True)


class ListHandler(RecordHandler):
    """Emit 'name<delim>version' per record."""

    def __init__(self, stream: Optional[TextIO] = None, delimiter: str = '\t'):
        super().__init__(stream)
        self.delimiter = delimiter

    def handle(self, record: Record) -> None:
        print(f"{record.name or ''}{self.delimiter}{record.version or ''}", file=self.stream)


class AttributeHandler(RecordHandler):
    """Emit the value(s) of one attribute, array elements one per line."""

    def __init__(self, label: str, stream: Optional[TextIO] = None):
        super().__init__(stream)
        self.label = label

    def handle(self, record: Record) -> None:
        value = record.get(self.label)
        if value is None:
            return
        if isinstance(value, tuple):
            for element in value:
                print(element, file=self.stream)
        else:
            print(value, file=self.stream)


class DescHandler(RecordHandler):
    """Write records back in desc block format."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        catalog: AttributeCatalog = DEFAULT_CATALOG,
        header: str = 'FILENAME'
    ):
        super().__init__(stream)
        self.catalog = catalog
        self.header = header

    def handle(self, record: Record) -> None:
        for line in encode_record(record, self.catalog, self.header):
            print(line, file=self.stream)


class TableHandler(RecordHandler):
    """Collect records and render them as a Rich table on the terminal call."""

    columns = ['Repository', 'Name', 'Version', 'Description']

    def __init__(self, stream: Optional[TextIO] = None, columns: Optional[List[str]] = None):
        super().__init__(stream)
        if columns:
            self.columns = columns
        self.rows: List[Dict[str, Any]] = []

    def handle(self, record: Record) -> None:
        self.rows.append(record.to_dict())

    def finish(self) -> None:
        if not self.rows:
            print("No results found", file=self.stream)
            return

        console = Console(file=self.stream)
        table = Table(show_header=True, header_style="bold")

        for col in self.columns:
            table.add_column(col)

        for row in self.rows:
            table.add_row(*[_format_value(row.get(col)) for col in self.columns])

        console.print(table)


def _format_value(value: Any, max_len: int = 50) -> str:
    """Format a value for table display."""
    if value is None:
        return ''
    if isinstance(value, list):
        s = ', '.join(str(v) for v in value[:3])
        if len(value) > 3:
            s += f' (+{len(value) - 3} more)'
        return s

    s = str(value)
    if len(s) > max_len:
        return s[:max_len-3] + '...'
    return s


def chain_last(handler: RecordHandler, final: bool):
    """
    Wrap a handler for one of several databases parsed into the same output.

    Only the final database may deliver the terminal is_last call.
    """
    def wrapper(record: Optional[Record], count: int, is_last: bool) -> None:
        handler(record, count, is_last and final)
    return wrapper


def emit_error(
    error: str,
    type: str = "error",
    context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Emit error to stderr as JSON.

    Args:
        error: Error message
        type: Error type (e.g., "MalformedStreamError")
        context: Additional context dict
    """
    obj: Dict[str, Any] = {
        'error': error,
        'type': type
    }
    if context:
        obj['context'] = context

    print(json.dumps(obj, ensure_ascii=False), file=sys.stderr, flush=True)
