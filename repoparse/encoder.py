"""
Writer for the desc block format.

Turns Records back into the line layout read by the decoder, e.g. to
rebuild a database text from filtered records.
"""

from typing import Iterable, Iterator, List

from .domain import AttributeCatalog, DEFAULT_CATALOG, Record


def encode_record(
    record: Record,
    catalog: AttributeCatalog = DEFAULT_CATALOG,
    header: str = 'FILENAME'
) -> List[str]:
    """
    Encode one record as desc lines (without newline characters).

    The header block is written first, followed by the remaining attributes
    in record order and a terminating blank line. Labels missing from the
    catalog are written with their upper-cased label as token. DBPath and
    Repository are not written; the decoder injects them.
    """
    header_spec = catalog.kind_and_label(header)
    header_label = header_spec.label if header_spec else header.capitalize()

    lines = [f'%{header}%', str(record.get(header_label, ''))]

    for label, value in record.attributes.items():
        if label == header_label:
            continue
        token = catalog.token_for_label(label) or label.upper()
        lines.append('')
        lines.append(f'%{token}%')
        if isinstance(value, (tuple, list)):
            lines.extend(str(element) for element in value)
        else:
            lines.append(str(value))

    lines.append('')
    return lines


def encode_records(
    records: Iterable[Record],
    catalog: AttributeCatalog = DEFAULT_CATALOG,
    header: str = 'FILENAME'
) -> Iterator[str]:
    for record in records:
        yield from encode_record(record, catalog, header)
