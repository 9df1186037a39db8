# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - filesystem store

Usually used as the blob store for binary documents.
"""


import os
import errno
import shutil
from urllib.parse import quote, unquote

from . import MutableStoreBase, BytesMutableStoreBase, FileMutableStoreBase


class _Store(MutableStoreBase):
    """
    A simple filesystem-based store.

    keys are quoted, so any key maps to a single valid filename.
    """
    def __init__(self, path):
        self.path = path

    def create(self):
        os.mkdir(self.path)

    def destroy(self):
        shutil.rmtree(self.path)

    def open(self):
        pass

    def close(self):
        pass

    def _mkpath(self, key):
        return os.path.join(self.path, quote(key, safe=''))

    def __iter__(self):
        for fn in os.listdir(self.path):
            yield unquote(fn)

    def __delitem__(self, key):
        try:
            os.remove(self._mkpath(key))
        except OSError as e:
            if e.errno == errno.ENOENT:
                raise KeyError(key)
            raise


class BytesStore(_Store, BytesMutableStoreBase):
    def __getitem__(self, key):
        try:
            with open(self._mkpath(key), 'rb') as f:
                return f.read()
        except IOError as e:
            if e.errno == errno.ENOENT:
                raise KeyError(key)
            raise

    def __setitem__(self, key, value):
        with open(self._mkpath(key), "wb") as f:
            f.write(value)


class FileStore(_Store, FileMutableStoreBase):
    def __getitem__(self, key):
        try:
            return open(self._mkpath(key), 'rb')
        except IOError as e:
            if e.errno == errno.ENOENT:
                raise KeyError(key)
            raise

    def __setitem__(self, key, stream):
        try:
            with open(self._mkpath(key), "wb") as f:
                blocksize = 64 * 1024
                data = stream.read(blocksize)
                while data:
                    f.write(data)
                    data = stream.read(blocksize)
        finally:
            stream.close()
