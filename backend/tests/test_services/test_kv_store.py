import pytest
from sqlalchemy.exc import OperationalError

from backend.cfo_helper.errors import StoreUnavailableError
from backend.cfo_helper.services.kv_store import KVStore


def test_get_missing_key_returns_none(store):
    assert store.get('nope') is None


def test_set_then_get_and_overwrite(store):
    store.set('cfo-helper-usage', {'scenarios': 1, 'reports': 0})
    assert store.get('cfo-helper-usage') == {'scenarios': 1, 'reports': 0}

    store.set('cfo-helper-usage', {'scenarios': 2, 'reports': 1})
    assert store.get('cfo-helper-usage') == {'scenarios': 2, 'reports': 1}


def test_get_by_prefix_only_matches_prefix(store):
    store.set('scenario-1', {'n': 1})
    store.set('scenario-2', {'n': 2})
    store.set('report-3', {'n': 3})
    store.set('scenarios', {'n': 4})

    values = store.get_by_prefix('scenario-')
    assert sorted(v['n'] for v in values) == [1, 2]


def test_prefix_wildcards_are_literal(store):
    store.set('a_b1', {'n': 1})
    store.set('axb2', {'n': 2})
    store.set('100%-3', {'n': 3})
    store.set('1000-4', {'n': 4})

    assert store.get_by_prefix('a_b') == [{'n': 1}]
    assert store.get_by_prefix('100%') == [{'n': 3}]


def test_mget_and_delete(store):
    store.set('a', 1)
    store.set('b', 2)

    assert store.mget(['b', 'missing', 'a']) == [2, None, 1]

    store.delete('a')
    assert store.get('a') is None
    assert store.mget([]) == []


class BrokenSession:
    def __init__(self):
        self.rolled_back = False

    def get(self, *args, **kwargs):
        raise OperationalError('SELECT', {}, Exception('database is locked'))

    def query(self, *args, **kwargs):
        raise OperationalError('SELECT', {}, Exception('database is locked'))

    def rollback(self):
        self.rolled_back = True


@pytest.mark.parametrize('call', [
    lambda s: s.get('k'),
    lambda s: s.set('k', 1),
    lambda s: s.get_by_prefix('k'),
    lambda s: s.delete('k'),
])
def test_database_errors_become_store_unavailable(call):
    session = BrokenSession()
    store = KVStore(session=session)

    with pytest.raises(StoreUnavailableError):
        call(store)
    assert session.rolled_back
