# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - store tests
"""


import pytest

from io import BytesIO


class _StoreTestBase(object):
    def setup_method(self, method):
        """
        self.st needs to be an created/opened store
        """
        raise NotImplementedError

    def teardown_method(self, method):
        """
        close and destroy self.st
        """
        self.st.close()
        self.st.destroy()

    def test_getitem_raises(self):
        with pytest.raises(KeyError):
            self.st['doesnotexist']

    def test_delitem_raises(self):
        with pytest.raises(KeyError):
            del self.st['doesnotexist']


class FileStoreTestBase(_StoreTestBase):
    def test_setitem_getitem_delitem(self):
        k, v = 'key', b'value'
        self.st[k] = BytesIO(v)
        with self.st[k] as f:
            assert v == f.read()
        del self.st[k]
        with pytest.raises(KeyError):
            self.st[k]

    def test_iter(self):
        kvs = set([('1', b'one'), ('2', b'two'), ('3', b'three'), ])
        for k, v in kvs:
            self.st[k] = BytesIO(v)
        result = set()
        for k in self.st:
            with self.st[k] as f:
                result.add((k, f.read()))
        assert result == kvs

    def test_len(self):
        assert len(self.st) == 0
        self.st['foo'] = BytesIO(b'bar')
        assert len(self.st) == 1
        del self.st['foo']
        assert len(self.st) == 0


class BytesStoreTestBase(_StoreTestBase):
    def test_setitem_getitem_delitem(self):
        k, v = 'key', b'value'
        self.st[k] = v
        assert v == self.st[k]
        del self.st[k]
        with pytest.raises(KeyError):
            self.st[k]

    def test_overwrite(self):
        self.st['key'] = b'old'
        self.st['key'] = b'new'
        assert self.st['key'] == b'new'
        assert len(self.st) == 1

    def test_iter(self):
        kvs = set([('1', b'one'), ('2', b'two'), ('3', b'three'), ])
        for k, v in kvs:
            self.st[k] = v
        result = set()
        for k in self.st:
            result.add((k, self.st[k]))
        assert result == kvs

    def test_len(self):
        assert len(self.st) == 0
        self.st['foo'] = b'bar'
        assert len(self.st) == 1
        del self.st['foo']
        assert len(self.st) == 0

    def test_contains(self):
        self.st['user:token'] = b'[]'
        assert 'user:token' in self.st
        assert 'user:other' not in self.st
