# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - key/value + blob backend tests

Note: theoretically, it should be enough to test with one kind of store,
      but we better test with a memory AND a fs/sqlite combination.
"""


import json
import os
import shutil
import tempfile

import pytest

from config import META, VALUE, BINARY_KEY
from errors import CorruptState

from backend.kvblob import Backend
from backend._tests import MutableBackendTestBase

from stores.memory import BytesStore as MemoryBytesStore
from stores.memory import FileStore as MemoryFileStore
from stores.sqlite import BytesStore as SqliteBytesStore
from stores.fs import FileStore as FSFileStore
from stores.wrappers import IndexedStore


def make_memory_backend():
    return Backend(IndexedStore(MemoryBytesStore(), MemoryBytesStore()),
                   IndexedStore(MemoryBytesStore(), MemoryBytesStore()),
                   MemoryBytesStore(),
                   MemoryFileStore())


class TestMemoryBackend(MutableBackendTestBase):
    def setup_method(self, method):
        self.be = make_memory_backend()
        self.be.create()
        self.be.open()

    def grant(self, user, token, authorizations):
        self.be.auth_store['%s:%s' % (user, token)] = json.dumps(authorizations).encode('utf-8')

    def test_inline_payload_in_record(self):
        self.be.put_document('joe', 'docs', 'a', b'text', 'text/plain', 1000)
        record = self.be.data_bucket.retrieve('joe:docs:a')
        assert record[VALUE] == 'text'
        assert BINARY_KEY not in record[META]
        assert len(self.be.blob_store) == 0

    def test_binary_payload_in_blob_store(self):
        self.be.put_document('joe', 'docs', 'a', b'\xff\xfe', 'image/png', 1000, binary=True)
        record = self.be.data_bucket.retrieve('joe:docs:a')
        assert VALUE not in record
        binary_key = record[META][BINARY_KEY]
        assert list(self.be.blob_store) == [binary_key]

    def test_replaced_blob_is_purged(self):
        self.be.put_document('joe', 'docs', 'a', b'\xff\x01', 'image/png', 1000, binary=True)
        self.be.put_document('joe', 'docs', 'a', b'\xff\x02', 'image/png', 2000, binary=True)
        assert len(self.be.blob_store) == 1
        self.be.put_document('joe', 'docs', 'a', b'now text', 'text/plain', 3000)
        assert len(self.be.blob_store) == 0

    def test_delete_purges_blob(self):
        self.be.put_document('joe', 'docs', 'a', b'\xff\x01', 'image/png', 1000, binary=True)
        self.be.delete_document('joe', 'docs', 'a')
        assert len(self.be.blob_store) == 0

    def test_root_marker_is_no_child(self):
        self.be.put_directory_marker('joe', '', 1000, b'1000 docs/ x')
        assert self.be.list_children('joe', '') == []

    def test_corrupt_record(self):
        self.be.data_bucket.store('joe:docs:a', {META: {}}, {})
        with pytest.raises(CorruptState):
            self.be.get_document('joe', 'docs', 'a')

    def test_missing_blob(self):
        self.be.put_document('joe', 'docs', 'a', b'\xff\x01', 'image/png', 1000, binary=True)
        for key in list(self.be.blob_store):
            del self.be.blob_store[key]
        with pytest.raises(CorruptState):
            self.be.get_document('joe', 'docs', 'a')

    def test_corrupt_authorizations(self):
        self.be.auth_store['joe:secret'] = b'not json'
        with pytest.raises(CorruptState):
            self.be.get_authorizations('joe', 'secret')


class TestPersistentBackend(MutableBackendTestBase):
    def setup_method(self, method):
        self.tmpdir = tempfile.mkdtemp()
        blob_path = os.path.join(self.tmpdir, 'blobs')
        db_name = os.path.join(self.tmpdir, 'rs.sqlite')
        self.be = Backend(IndexedStore(SqliteBytesStore(db_name, 'data'),
                                       SqliteBytesStore(db_name, 'data_index')),
                          IndexedStore(SqliteBytesStore(db_name, 'directories'),
                                       SqliteBytesStore(db_name, 'directories_index')),
                          SqliteBytesStore(db_name, 'authorizations'),
                          FSFileStore(blob_path))
        self.be.create()
        self.be.open()

    def teardown_method(self, method):
        super(TestPersistentBackend, self).teardown_method(method)
        shutil.rmtree(self.tmpdir)

    def grant(self, user, token, authorizations):
        self.be.auth_store['%s:%s' % (user, token)] = json.dumps(authorizations).encode('utf-8')

