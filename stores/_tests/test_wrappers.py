# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - store wrapper tests
"""


import pytest

from errors import CorruptState

from ..memory import BytesStore
from ..wrappers import IndexedStore


class TestIndexedStore(object):
    def setup_method(self, method):
        self.st = IndexedStore(BytesStore(), BytesStore())
        self.st.create()
        self.st.open()

    def teardown_method(self, method):
        self.st.close()
        self.st.destroy()

    def test_store_retrieve_remove(self):
        self.st.store('k', dict(name='n'), dict(user=['joe']))
        assert self.st.retrieve('k') == dict(name='n')
        assert 'k' in self.st
        self.st.remove('k')
        with pytest.raises(KeyError):
            self.st.retrieve('k')
        with pytest.raises(KeyError):
            self.st.remove('k')

    def test_get_index(self):
        self.st.store('a', {}, dict(user=['joe'], directory=['docs']))
        self.st.store('b', {}, dict(user=['joe'], directory=['/']))
        self.st.store('c', {}, dict(user=['ann'], directory=['docs']))
        assert self.st.get_index('user', 'joe') == set(['a', 'b'])
        assert self.st.get_index('directory', 'docs') == set(['a', 'c'])
        assert self.st.get_index('directory', 'nothing') == set()

    def test_reindex_on_store(self):
        self.st.store('a', {}, dict(directory=['old']))
        self.st.store('a', {}, dict(directory=['new']))
        assert self.st.get_index('directory', 'old') == set()
        assert self.st.get_index('directory', 'new') == set(['a'])

    def test_remove_unindexes(self):
        self.st.store('a', {}, dict(user=['joe']))
        self.st.store('b', {}, dict(user=['joe']))
        self.st.remove('a')
        assert self.st.get_index('user', 'joe') == set(['b'])
        self.st.remove('b')
        # empty index entries do not linger
        assert len(self.st.index_store) == 0

    def test_map(self):
        self.st.store('a', dict(size=1), dict(user=['joe']))
        self.st.store('b', dict(size=2), dict(user=['joe']))
        keys = self.st.get_index('user', 'joe') | set(['vanished'])
        result = self.st.map(keys, lambda key, record: [(key, record['size'])])
        assert result == [('a', 1), ('b', 2)]

    def test_corrupt_record(self):
        self.st.record_store['bad'] = b'{not json'
        with pytest.raises(CorruptState):
            self.st.retrieve('bad')
        self.st.record_store['bad'] = b'[1, 2]'
        with pytest.raises(CorruptState):
            self.st.retrieve('bad')
