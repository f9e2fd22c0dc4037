"""
Tests for repoparse.infra.archive.

Archives are built in tmp_path with tarfile (and zstandard for .zst
databases), laid out the way repo-add writes them.
"""

import io
import tarfile
from types import SimpleNamespace

import pytest
import zstandard

from repoparse.decoder import StreamDecoder
from repoparse.infra import database_name, open_database


PACKAGES = {
    'foo-1.0-1': "%FILENAME%\nfoo-1.0-1-any.pkg.tar.zst\n\n%NAME%\nfoo\n\n%VERSION%\n1.0-1\n",
    'bar-2.0-1': "%FILENAME%\nbar-2.0-1-any.pkg.tar.zst\n\n%NAME%\nbar\n\n%VERSION%\n2.0-1\n",
}

FILES = {
    'foo-1.0-1': "%FILES%\nusr/\nusr/bin/\nusr/bin/foo\n",
    'bar-2.0-1': "%FILES%\nusr/\nusr/lib/libbar.so\n",
}


def _add(tar, name, text):
    data = text.encode('utf-8')
    info = tarfile.TarInfo(name)
    info.size = len(data)
    tar.addfile(info, io.BytesIO(data))


def build_tar(fileobj, mode, with_files=False):
    with tarfile.open(fileobj=fileobj, mode=mode) as tar:
        for pkg, desc in PACKAGES.items():
            directory = tarfile.TarInfo(pkg)
            directory.type = tarfile.DIRTYPE
            tar.addfile(directory)
            _add(tar, f'{pkg}/desc', desc)
            if with_files:
                _add(tar, f'{pkg}/files', FILES[pkg])


def records_of(path):
    return list(StreamDecoder().iter_records(open_database(path), str(path), database_name(path)))


class TrickleReader(io.RawIOBase):
    """Pipe-like stream returning at most chunk bytes per read."""

    def __init__(self, data, chunk=100):
        self._data = io.BytesIO(data)
        self._chunk = chunk

    def readable(self):
        return True

    def readinto(self, buffer):
        data = self._data.read(min(len(buffer), self._chunk))
        buffer[:len(data)] = data
        return len(data)


class TestOpenDatabase:
    """Tests for reading database sources."""

    @pytest.mark.parametrize('mode,suffix', [
        ('w:gz', '.db.tar.gz'),
        ('w:xz', '.db.tar.xz'),
        ('w:bz2', '.db.tar.bz2'),
        ('w', '.db.tar'),
    ])
    def test_tar_archives(self, tmp_path, mode, suffix):
        path = tmp_path / f'custom{suffix}'
        with open(path, 'wb') as f:
            build_tar(f, mode)

        records = records_of(path)
        assert [r.name for r in records] == ['foo', 'bar']
        assert records[0].repository == 'custom'
        assert records[0].db_path == str(path)

    def test_zstd_archive(self, tmp_path):
        buffer = io.BytesIO()
        build_tar(buffer, 'w')
        path = tmp_path / 'custom.db.tar.zst'
        path.write_bytes(zstandard.ZstdCompressor().compress(buffer.getvalue()))

        assert [r.name for r in records_of(path)] == ['foo', 'bar']

    def test_files_database(self, tmp_path):
        """The files member extends the entry of its package."""
        path = tmp_path / 'custom.files.tar.gz'
        with open(path, 'wb') as f:
            build_tar(f, 'w:gz', with_files=True)

        records = records_of(path)
        assert records[0]['Files'] == ('usr/', 'usr/bin/', 'usr/bin/foo')
        assert records[1]['Files'] == ('usr/', 'usr/lib/libbar.so')

    def test_member_without_trailing_newline(self, tmp_path):
        path = tmp_path / 'custom.db'
        with tarfile.open(path, 'w:gz') as tar:
            _add(tar, 'a-1-1/desc', "%FILENAME%\na.pkg\n%NAME%\na")
            _add(tar, 'b-1-1/desc', "%FILENAME%\nb.pkg\n%NAME%\nb")

        assert [r.name for r in records_of(path)] == ['a', 'b']

    def test_plain_text(self, tmp_path):
        path = tmp_path / 'desc'
        path.write_text(PACKAGES['foo-1.0-1'] + '\n' + PACKAGES['bar-2.0-1'])

        records = records_of(path)
        assert [r.name for r in records] == ['foo', 'bar']
        assert records[0].repository == 'desc'

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.db'
        path.write_bytes(b'')
        assert records_of(path) == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(open_database(tmp_path / 'missing.db'))

    @pytest.mark.parametrize('mode', ['w', 'w:gz'])
    def test_tar_on_slow_stdin(self, monkeypatch, mode):
        """Archives are detected even when the pipe delivers short reads."""
        buffer = io.BytesIO()
        build_tar(buffer, mode)
        monkeypatch.setattr('sys.stdin', SimpleNamespace(buffer=TrickleReader(buffer.getvalue())))

        records = records_of('-')
        assert [r.name for r in records] == ['foo', 'bar']
        assert records[0].repository == 'stdin'

    def test_plain_text_on_slow_stdin(self, monkeypatch):
        data = PACKAGES['foo-1.0-1'].encode('utf-8')
        monkeypatch.setattr('sys.stdin', SimpleNamespace(buffer=TrickleReader(data, chunk=7)))

        assert [r.name for r in records_of('-')] == ['foo']


class TestDatabaseName:
    """Tests for database_name()."""

    @pytest.mark.parametrize('path,expected', [
        ('custom.db', 'custom'),
        ('/var/cache/pacman/custom/custom.db.tar.gz', 'custom'),
        ('core.files', 'core'),
        ('core.files.tar.zst', 'core'),
        ('my.repo.db', 'my.repo'),
        ('desc', 'desc'),
        ('-', 'stdin'),
    ])
    def test_names(self, path, expected):
        assert database_name(path) == expected
