"""Tests for the domain layer."""

import pytest

from repoparse.domain import (
    AttributeCatalog,
    AttributeKind,
    AttributeSpec,
    DEFAULT_CATALOG,
    Record,
    fallback_label,
)


class TestAttributeCatalog:
    """Tests for AttributeCatalog."""

    def test_lookup(self):
        spec = DEFAULT_CATALOG.kind_and_label('DEPENDS')
        assert spec == AttributeSpec(AttributeKind.ARRAY, 'Depends')

    def test_lookup_renamed_tokens(self):
        assert DEFAULT_CATALOG.kind_and_label('BASE').label == 'PackageBase'
        assert DEFAULT_CATALOG.kind_and_label('DESC').label == 'Description'

    def test_numeric_tokens(self):
        for token in ('BUILDDATE', 'CSIZE', 'ISIZE'):
            assert DEFAULT_CATALOG.kind_and_label(token).kind is AttributeKind.NUMERIC

    def test_checksums_are_strings(self):
        assert DEFAULT_CATALOG.kind_and_label('MD5SUM').kind is AttributeKind.STRING
        assert DEFAULT_CATALOG.kind_and_label('SHA256SUM').kind is AttributeKind.STRING

    def test_unknown_token(self):
        assert DEFAULT_CATALOG.kind_and_label('FOOBAR') is None
        assert 'FOOBAR' not in DEFAULT_CATALOG

    def test_size(self):
        assert len(DEFAULT_CATALOG) == 24

    def test_list_labels_sorted(self):
        labels = DEFAULT_CATALOG.list_labels()
        assert labels == sorted(labels)
        assert labels[0] == 'Arch'
        assert 'URL' in labels
        assert len(labels) == 24

    def test_list_tokens_sorted(self):
        tokens = DEFAULT_CATALOG.list_tokens()
        assert tokens == sorted(tokens)
        assert tokens[0] == 'ARCH'

    def test_reverse_lookup(self):
        assert DEFAULT_CATALOG.token_for_label('PackageBase') == 'BASE'
        assert DEFAULT_CATALOG.token_for_label('Nope') is None
        assert DEFAULT_CATALOG.spec_for_label('ISize').kind is AttributeKind.NUMERIC
        assert DEFAULT_CATALOG.spec_for_label('Nope') is None

    def test_extend_returns_new_catalog(self):
        extended = DEFAULT_CATALOG.extend({'xdata': ['array', 'XData']})
        assert extended.kind_and_label('XDATA') == AttributeSpec(AttributeKind.ARRAY, 'XData')
        assert DEFAULT_CATALOG.kind_and_label('XDATA') is None
        assert len(extended) == 25

    def test_extend_overrides(self):
        extended = DEFAULT_CATALOG.extend({'URL': ('string', 'Url')})
        assert extended.kind_and_label('URL').label == 'Url'
        assert DEFAULT_CATALOG.kind_and_label('URL').label == 'URL'

    def test_extend_invalid_kind(self):
        with pytest.raises(ValueError):
            DEFAULT_CATALOG.extend({'X': ('blob', 'X')})

    def test_entries_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_CATALOG.entries['X'] = AttributeSpec(AttributeKind.STRING, 'X')

    def test_catalogs_coexist(self):
        old = AttributeCatalog({'NAME': ('string', 'Name')})
        assert old.kind_and_label('DEPENDS') is None
        assert DEFAULT_CATALOG.kind_and_label('DEPENDS') is not None

    def test_fallback_label(self):
        assert fallback_label('FOOBAR') == 'Foobar'
        assert fallback_label('XDATA') == 'Xdata'


class TestRecord:
    """Tests for Record domain object."""

    def make_record(self):
        return Record(
            db_path='/srv/custom.db',
            repository='custom',
            attributes={
                'FileName': 'foo-1-1-any.pkg.tar.zst',
                'Name': 'foo',
                'Version': '1-1',
                'PackageBase': 'foo-base',
                'Depends': ('bar', 'baz'),
                'CSize': 10,
            },
        )

    def test_properties(self):
        record = self.make_record()
        assert record.name == 'foo'
        assert record.version == '1-1'
        assert record.base == 'foo-base'
        assert record.filename == 'foo-1-1-any.pkg.tar.zst'

    def test_to_dict_order_and_lists(self):
        d = self.make_record().to_dict()
        assert list(d)[:3] == ['DBPath', 'Repository', 'FileName']
        assert d['Depends'] == ['bar', 'baz']
        assert d['CSize'] == 10

    def test_getitem(self):
        record = self.make_record()
        assert record['Repository'] == 'custom'
        assert record['Depends'] == ('bar', 'baz')
        with pytest.raises(KeyError):
            record['Missing']

    def test_contains_and_labels(self):
        record = self.make_record()
        assert 'DBPath' in record
        assert 'Name' in record
        assert 'Missing' not in record
        assert list(record.labels())[:2] == ['DBPath', 'Repository']

    def test_get_default(self):
        assert self.make_record().get('Missing', 'x') == 'x'

    def test_immutable(self):
        record = self.make_record()
        with pytest.raises(AttributeError):
            record.repository = 'other'

    def test_attributes_are_read_only(self):
        record = self.make_record()
        with pytest.raises(TypeError):
            record.attributes['Name'] = 'tampered'
        assert record.name == 'foo'

    def test_attributes_copied_from_source(self):
        source = {'Name': 'foo'}
        record = Record(db_path='x', repository='x', attributes=source)
        source['Name'] = 'tampered'
        assert record.name == 'foo'

    def test_hashable_and_equal(self):
        first, second = self.make_record(), self.make_record()
        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1
