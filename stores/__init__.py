# Copyright: 2011 MoinMoin:RonnyPfannschmidt
# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - stores
==============================

We use a layered approach like this::

 Gateway Middleware                does complex stuff like authorization,
 |                                 conditional requests, directory tree
 |                                 maintenance and listings
 v
 Backend (kvblob or swift)         documents, directory markers, children
 |           |
 v           v
 record store  blob store          simplest stuff: store, get, destroy and
                                   iterate over key/value pairs

A store is a MutableMapping. Bytes stores take and return bytes, file stores
take a readable stream and return one.
"""


from abc import abstractmethod
from collections.abc import Mapping, MutableMapping


class StoreBase(Mapping):
    """
    A simple read-only key/value store.
    """
    @abstractmethod
    def open(self):
        """
        open the store, allocate resources
        """

    @abstractmethod
    def close(self):
        """
        close the store, free resources (except the stored data!)
        """

    @abstractmethod
    def __iter__(self):
        """
        iterate over keys
        """

    @abstractmethod
    def __getitem__(self, key):
        """
        return data stored for key, raise KeyError if there is none
        """

    def __len__(self):
        return len([key for key in self])


class MutableStoreBase(StoreBase, MutableMapping):
    """
    same as StoreBase, but read/write
    """
    @abstractmethod
    def create(self):
        """
        create the store
        """

    @abstractmethod
    def destroy(self):
        """
        destroy the store, erase all data it contains
        """

    @abstractmethod
    def __setitem__(self, key, value):
        """
        store value under key
        """

    @abstractmethod
    def __delitem__(self, key):
        """
        delete the value stored under key, raise KeyError if there is none
        """


class BytesMutableStoreBase(MutableStoreBase):
    """
    mutable store for bytes
    """


class FileMutableStoreBase(MutableStoreBase):
    """
    mutable store for files (readable streams)
    """
