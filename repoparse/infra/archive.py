"""
Repository database sources for repoparse.

A pacman repository database (`custom.db`, `custom.files`) is a tar
archive with one directory per package holding a `desc` file (and a
`files` file in .files databases). This module reads such archives, plain
desc text files and standard input as a single stream of text lines:

- gzip/bzip2/xz/uncompressed archives through tarfile
- zstd archives through the zstandard library
- anything that is not a tar archive as plain text
"""

import io
import logging
import sys
import tarfile
from pathlib import Path
from typing import BinaryIO, Iterator, Union

import zstandard

logger = logging.getLogger(__name__)

STDIN = '-'

ZSTD_MAGIC = b'\x28\xb5\x2f\xfd'

# Members holding desc blocks; package directories, .sig and other files are skipped
DESC_MEMBERS = ('desc', 'files')

DB_SUFFIXES = ('.db', '.files')


def database_name(path: Union[str, Path]) -> str:
    """
    Derive the repository name from a database path.

    'custom.db.tar.gz' -> 'custom', 'core.files' -> 'core', '-' -> 'stdin'
    """
    if str(path) == STDIN:
        return 'stdin'

    name = Path(path).name
    for suffix in DB_SUFFIXES:
        index = name.find(suffix)
        if index > 0:
            return name[:index]
    return name.split('.', 1)[0] or name


def _is_desc_member(member: tarfile.TarInfo) -> bool:
    return member.isfile() and member.name.rsplit('/', 1)[-1] in DESC_MEMBERS


def _iter_tar_lines(tar: tarfile.TarFile) -> Iterator[str]:
    for member in tar:
        if not _is_desc_member(member):
            continue
        handle = tar.extractfile(member)
        if handle is None:
            continue
        logger.debug(f"reading {member.name}")
        with io.TextIOWrapper(handle, encoding='utf-8') as text:
            yield from text
        # Keep consecutive blocks apart when a member lacks a trailing newline
        yield '\n'


class _PrefixedStream(io.RawIOBase):
    """Raw stream replaying bytes already read from another stream."""

    def __init__(self, head: bytes, stream: BinaryIO):
        self._head = head
        self._stream = stream

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self._head:
            data, self._head = self._head[:len(buffer)], self._head[len(buffer):]
        else:
            data = self._stream.read(len(buffer))
        buffer[:len(data)] = data
        return len(data)


def _read_head(stream: BinaryIO, size: int = 512) -> bytes:
    # Pipes may deliver less than size bytes per read
    head = b''
    while len(head) < size:
        chunk = stream.read(size - len(head))
        if not chunk:
            break
        head += chunk
    return head


def _iter_stream_lines(stream: BinaryIO) -> Iterator[str]:
    """Lines of a binary stream that is either a tar archive or plain text."""
    head = _read_head(stream)
    stream = io.BufferedReader(_PrefixedStream(head, stream))

    if head.startswith(ZSTD_MAGIC):
        dctx = zstandard.ZstdDecompressor()
        with dctx.stream_reader(stream) as reader:
            with tarfile.open(fileobj=reader, mode='r|') as tar:
                yield from _iter_tar_lines(tar)
        return

    if _looks_like_tar(head):
        with tarfile.open(fileobj=stream, mode='r|*') as tar:
            yield from _iter_tar_lines(tar)
        return

    # Closing the wrapper leaves the caller's stream open
    with io.TextIOWrapper(stream, encoding='utf-8') as text:
        yield from text


def _looks_like_tar(head: bytes) -> bool:
    if head[:2] == b'\x1f\x8b' or head[:3] == b'BZh' or head[:6] == b'\xfd7zXZ\x00':
        return True
    # ustar magic at offset 257 of an uncompressed header
    return head[257:262] == b'ustar'


def open_database(path: Union[str, Path]) -> Iterator[str]:
    """
    Yield the text lines of a repository database.

    Args:
        path: Database archive, plain desc file, or '-' for standard input

    Raises:
        FileNotFoundError, tarfile.ReadError, zstandard.ZstdError,
        UnicodeDecodeError: propagated unchanged
    """
    if str(path) == STDIN:
        yield from _iter_stream_lines(sys.stdin.buffer)
        return

    with open(Path(path).expanduser(), 'rb') as stream:
        yield from _iter_stream_lines(stream)
