# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - backend tests
"""


import hashlib

import pytest

from config import NAME, ETAG, CONTENTTYPE, SIZE, TIMESTAMP
from errors import NotFound


class MutableBackendTestBase(object):
    def setup_method(self, method):
        """
        self.be needs to be an created/opened backend
        """
        raise NotImplementedError

    def teardown_method(self, method):
        """
        close and destroy self.be
        """
        self.be.close()
        self.be.destroy()

    def grant(self, user, token, authorizations):
        """
        give token the authorizations (list of "scope:permission")
        """
        raise NotImplementedError

    def test_get_document_raises(self):
        with pytest.raises(NotFound):
            self.be.get_document('joe', 'docs', 'doesnotexist')
        # NotFound is a KeyError
        with pytest.raises(KeyError):
            self.be.head_document('joe', 'docs', 'doesnotexist')

    def test_delete_document_raises(self):
        with pytest.raises(NotFound):
            self.be.delete_document('joe', 'docs', 'doesnotexist')

    def test_put_get_delete(self):
        data = b'hello'
        meta = self.be.put_document('joe', 'docs', 'notes.txt', data, 'text/plain', 1000)
        assert meta[ETAG] == hashlib.md5(data).hexdigest()
        assert meta[SIZE] == len(data)
        m, d = self.be.get_document('joe', 'docs', 'notes.txt')
        assert d == data
        assert m[ETAG] == meta[ETAG]
        assert m[CONTENTTYPE] == 'text/plain'
        assert m[TIMESTAMP] == 1000
        self.be.delete_document('joe', 'docs', 'notes.txt')
        with pytest.raises(NotFound):
            self.be.get_document('joe', 'docs', 'notes.txt')

    def test_head_document(self):
        self.be.put_document('joe', '', 'top', b'at the root', 'text/plain', 1000)
        meta = self.be.head_document('joe', '', 'top')
        assert meta[NAME] == 'top'
        assert meta[SIZE] == len(b'at the root')

    def test_overwrite_changes_etag(self):
        first = self.be.put_document('joe', 'docs', 'a', b'one', 'text/plain', 1000)
        second = self.be.put_document('joe', 'docs', 'a', b'two', 'text/plain', 2000)
        assert first[ETAG] != second[ETAG]
        meta, data = self.be.get_document('joe', 'docs', 'a')
        assert data == b'two'
        assert meta[ETAG] == second[ETAG]

    def test_binary_roundtrip(self):
        data = bytes(range(256))
        meta = self.be.put_document('joe', 'photos', 'x.bin', data, 'application/octet-stream',
                                    1000, binary=True)
        m, d = self.be.get_document('joe', 'photos', 'x.bin')
        assert d == data
        assert m[ETAG] == meta[ETAG] == hashlib.md5(data).hexdigest()

    def test_users_are_separate(self):
        self.be.put_document('joe', 'docs', 'a', b'joe', 'text/plain', 1000)
        with pytest.raises(NotFound):
            self.be.get_document('ann', 'docs', 'a')

    def test_directory_marker(self):
        with pytest.raises(NotFound):
            self.be.get_directory_marker('joe', 'docs')
        meta = self.be.put_directory_marker('joe', 'docs', 1000, b'1000 a x')
        assert meta[ETAG] == hashlib.md5(b'1000 a x').hexdigest()
        m = self.be.get_directory_marker('joe', 'docs')
        assert m[ETAG] == meta[ETAG]
        assert m[TIMESTAMP] == 1000
        self.be.delete_directory_marker('joe', 'docs')
        with pytest.raises(NotFound):
            self.be.get_directory_marker('joe', 'docs')

    def test_list_children(self):
        self.be.put_document('joe', 'docs', 'b.txt', b'b', 'text/plain', 1000)
        self.be.put_document('joe', 'docs', 'a.json', b'{}', 'application/json', 1000)
        self.be.put_document('joe', 'docs/sub', 'c', b'c', 'text/plain', 1000)
        self.be.put_directory_marker('joe', 'docs/sub', 1000, b'1000 c x')
        self.be.put_document('joe', 'other', 'd', b'd', 'text/plain', 1000)
        children = dict((c[NAME], c) for c in self.be.list_children('joe', 'docs'))
        assert sorted(children) == ['a.json', 'b.txt', 'sub/']
        assert children['a.json'][CONTENTTYPE] == 'application/json'
        assert children['b.txt'][SIZE] == 1
        assert children['b.txt'][ETAG] == hashlib.md5(b'b').hexdigest()
        assert children['sub/'][ETAG] == hashlib.md5(b'1000 c x').hexdigest()

    def test_list_root(self):
        self.be.put_document('joe', '', 'top', b't', 'text/plain', 1000)
        self.be.put_directory_marker('joe', 'docs', 1000, b'1000 a x')
        self.be.put_directory_marker('joe', '', 1000, b'1000 docs/ y')
        names = sorted(c[NAME] for c in self.be.list_children('joe', ''))
        assert names == ['docs/', 'top']

    def test_has_children(self):
        assert not self.be.has_children('joe', 'docs')
        self.be.put_document('joe', 'docs', 'a', b'a', 'text/plain', 1000)
        assert self.be.has_children('joe', 'docs')
        self.be.delete_document('joe', 'docs', 'a')
        assert not self.be.has_children('joe', 'docs')
        self.be.put_directory_marker('joe', 'docs/sub', 1000, b'1000 c x')
        assert self.be.has_children('joe', 'docs')

    def test_authorizations(self):
        assert list(self.be.get_authorizations('joe', 'nosuchtoken')) == []
        self.grant('joe', 'secret', ['contacts:r', 'documents:rw'])
        assert sorted(self.be.get_authorizations('joe', 'secret')) == ['contacts:r', 'documents:rw']
        assert list(self.be.get_authorizations('ann', 'secret')) == []

    def test_colons_in_names(self):
        self.be.put_document('joe', 'docs', 'a:b', b'one', 'text/plain', 1000)
        self.be.put_document('joe', 'docs:a', 'b', b'two', 'text/plain', 1000)
        assert self.be.get_document('joe', 'docs', 'a:b')[1] == b'one'
        assert self.be.get_document('joe', 'docs:a', 'b')[1] == b'two'
        assert [c[NAME] for c in self.be.list_children('joe', 'docs')] == ['a:b']
        self.be.delete_document('joe', 'docs', 'a:b')
        assert self.be.get_document('joe', 'docs:a', 'b')[1] == b'two'
