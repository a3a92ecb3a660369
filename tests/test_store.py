import pytest
from sphereplay.services.store import DocumentStore

@pytest.fixture
def store(app):
    return DocumentStore()

@pytest.fixture
def record():
    return {'game_type': 'tictactoe', 'turn': 'host', 'board': [None] * 9}

def test_create_and_read(store, record):
    assert store.create('ABCD', record) is True
    assert store.read('ABCD') == record
    assert store.read_versioned('ABCD') == (record, 1)

def test_create_refuses_taken_key(store, record):
    store.create('ABCD', record)
    assert store.create('ABCD', dict(record, turn='guest')) is False
    assert store.read('ABCD')['turn'] == 'host'

def test_read_absent(store):
    assert store.read('NONE') is None
    assert store.read_versioned('NONE') == (None, None)

def test_compare_and_swap_requires_current_version(store, record):
    store.create('ABCD', record)
    first = dict(record, turn='guest')
    assert store.compare_and_swap('ABCD', 1, first) is True
    assert store.read_versioned('ABCD') == (first, 2)

    # A writer still holding version 1 loses
    assert store.compare_and_swap('ABCD', 1, dict(record, turn='host')) is False
    assert store.read('ABCD') == first

def test_update_merges_fields(store, record):
    store.create('ABCD', record)
    merged = store.update('ABCD', {'winner': 'Draw'})
    assert merged['winner'] == 'Draw'
    assert merged['board'] == record['board']
    assert store.read_versioned('ABCD') == (merged, 2)
    assert store.update('NONE', {'winner': 'Draw'}) is None

def test_delete(store, record):
    store.create('ABCD', record)
    assert store.delete('ABCD') is True
    assert store.read('ABCD') is None
    assert store.delete('ABCD') is False
