# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - fs store tests
"""


import os
import tempfile

import pytest

from ..fs import BytesStore, FileStore

from . import BytesStoreTestBase, FileStoreTestBase


@pytest.mark.parametrize('Store', [BytesStore, FileStore])
def test_create(tmpdir, Store):
    target = tmpdir.join('store')
    assert not target.check()

    store = Store(str(target))
    assert not target.check()
    store.create()
    assert target.check()

    return store


@pytest.mark.parametrize('Store', [BytesStore, FileStore])
def test_destroy(tmpdir, Store):
    store = test_create(tmpdir, Store)
    target = tmpdir.join('store')
    store.destroy()
    assert not target.check()


def test_keys_are_quoted(tmpdir):
    store = BytesStore(str(tmpdir.join('store')))
    store.create()
    store.open()
    key = 'alice:photos/2012:a b.jpg'
    store[key] = b'data'
    assert list(store) == [key]
    assert store[key] == b'data'
    assert len(tmpdir.join('store').listdir()) == 1


def _mkstore(Store):
    path = tempfile.mkdtemp()
    os.rmdir(path)
    store = Store(path)
    store.create()
    store.open()
    return store


class TestBytesStore(BytesStoreTestBase):
    def setup_method(self, method):
        self.st = _mkstore(BytesStore)


class TestFileStore(FileStoreTestBase):
    def setup_method(self, method):
        self.st = _mkstore(FileStore)
