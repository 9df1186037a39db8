# Copyright: 2011 MoinMoin:RonnyPfannschmidt
# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - backend utilities
"""


import hashlib
import time

from config import HASH_ALGORITHM


class TrackingFileWrapper(object):
    """
    Wraps a file and computes hashcode and file size while it is read.
    Requires that initially the realfile is open and at pos 0.
    Users need to call .read(blocksize) until it does not return any more data.
    After this self.hash and self.size will have the wanted values.
    self.hash is the hash instance, you may want to call self.hash.hexdigest().
    Finally, you must call .close().
    """
    def __init__(self, realfile, hash_method=HASH_ALGORITHM):
        self._realfile = realfile
        self.hash = hashlib.new(hash_method)
        self.size = 0

    def read(self, size=-1):
        data = self._realfile.read(size)
        self.hash.update(data)
        self.size += len(data)
        return data

    def close(self):
        self._realfile.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def make_etag(data):
    """
    etag of a payload: hex digest of its bytes
    """
    return hashlib.new(HASH_ALGORITHM, data).hexdigest()


def etag_for(lines):
    """
    etag of a derived object: hex digest over its identifying lines
    """
    return make_etag('\n'.join(lines).encode('utf-8'))


def now_ms(clock=time.time):
    return int(clock() * 1000)


def parent_directories_for(directory):
    """
    ancestor chain of a document in directory, from the directory itself up
    to the root: u'a/b' -> [u'a/b', u'a', u'']
    """
    directories = [d for d in directory.split('/') if d]
    parent_directories = []
    while directories:
        parent_directories.append('/'.join(directories))
        directories.pop()
    parent_directories.append('') # root
    return parent_directories


def parent_directory_for(directory):
    """
    u'a/b' -> u'a', u'a' -> u'', root has no parent (None)
    """
    if not directory:
        return None
    return directory.rpartition('/')[0]


def basename(directory):
    return directory.rpartition('/')[2]
