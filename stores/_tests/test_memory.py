# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - memory store tests
"""


import pytest

from ..memory import BytesStore, FileStore

from . import BytesStoreTestBase, FileStoreTestBase


@pytest.mark.parametrize('Store', [BytesStore, FileStore])
def test_create(Store):
    store = Store()
    assert store._st is None

    store.create()
    assert store._st == {}

    return store


@pytest.mark.parametrize('Store', [BytesStore, FileStore])
def test_destroy(Store):
    store = test_create(Store)
    store.destroy()
    assert store._st is None


class TestBytesStore(BytesStoreTestBase):
    def setup_method(self, method):
        self.st = BytesStore()
        self.st.create()
        self.st.open()


class TestFileStore(FileStoreTestBase):
    def setup_method(self, method):
        self.st = FileStore()
        self.st.create()
        self.st.open()
