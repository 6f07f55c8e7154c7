import pytest

from gamestorage_lib.storage.accessor import DictAccessor, apply_fields, split_path
from gamestorage_lib.storage.errors import InvalidFieldPath


def test_dict_accessor_basic():
    data = {}
    DictAccessor().set(data, ('a', 'b'), 1)
    assert data == {'a': {'b': 1}}


def test_dict_accessor_replaces_non_mapping_intermediate():
    data = {'a': 5}
    DictAccessor().set(data, ('a', 'b'), 1)
    assert data == {'a': {'b': 1}}


def test_split_path():
    assert split_path('a') == ('a',)
    assert split_path('a.b.c') == ('a', 'b', 'c')


@pytest.mark.parametrize('path', ['', '.a', 'a.', 'a..b'])
def test_split_path_rejects_empty_segments(path):
    with pytest.raises(InvalidFieldPath) as ei:
        split_path(path)
    assert ei.value.status == 400


def test_apply_fields_creates_nesting_and_keeps_siblings():
    doc = {'a': {'x': 1}, 'top': True}
    apply_fields(doc, {'a.b.c': 2, 'n': 3})
    assert doc == {'a': {'x': 1, 'b': {'c': 2}}, 'top': True, 'n': 3}


def test_apply_fields_skips_names():
    doc = {'_id': 'k'}
    apply_fields(doc, {'_id': 'other', 'v': 1}, skip=('_id',))
    assert doc == {'_id': 'k', 'v': 1}


def test_apply_fields_skips_nested_paths_under_skipped_names():
    doc = {'_id': 'k'}
    apply_fields(doc, {'_id.x': 'other', 'v': 1}, skip=('_id',))
    assert doc == {'_id': 'k', 'v': 1}


def test_apply_fields_invalid_path_writes_nothing():
    doc = {'a': 1}
    with pytest.raises(InvalidFieldPath):
        apply_fields(doc, {'b': 2, 'c..d': 3})
    assert doc == {'a': 1}


@pytest.mark.parametrize('fields', [
    {'a.b': 1, 'a': 2},
    {'a': 2, 'a.b': 1},
    {'x': 0, 'a.b': 1, 'a.b.c': 2},
])
def test_apply_fields_rejects_conflicting_paths(fields):
    doc = {'keep': True}
    with pytest.raises(InvalidFieldPath) as ei:
        apply_fields(doc, fields)
    assert ei.value.status == 400
    assert doc == {'keep': True}


def test_apply_fields_allows_sibling_paths_with_shared_prefix():
    doc = {}
    apply_fields(doc, {'a.b': 1, 'a.c': 2, 'ab': 3})
    assert doc == {'a': {'b': 1, 'c': 2}, 'ab': 3}
