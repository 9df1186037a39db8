# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - directory tree maintenance

Backends only know single documents, so after every document write or delete
we walk the ancestor chain of the document (its directory up to the root)
and create, update or prune the synthetic directory markers.

A marker body records the last change beneath it::

    <timestamp> <changed child name> <changed child etag or ->

and the marker etag is the hash of that body. A change to a document thus
changes the etag of its directory marker, which changes the etag of the
grandparent marker, and so on up to the root.

This is best effort: the document operation already committed, so a failure
on one level is logged and the walk goes on with the next level. Concurrent
changes below the same directory race on its marker, last write wins.
"""


import logging

from config import ETAG
from errors import StorageError

from backend._util import parent_directories_for, basename


def marker_body(timestamp, name, etag):
    return ('%d %s %s' % (timestamp, name, etag or '-')).encode('utf-8')


class DirectoryTree(object):
    def __init__(self, backend):
        self.backend = backend

    def _check(self, deadline):
        if deadline is not None:
            deadline.check()

    def update(self, user, directory, key, etag, timestamp, deadline=None):
        """
        a document at directory/key was stored with etag: upsert the markers
        of all ancestors.
        """
        name, child_etag = key, etag
        for dirname in parent_directories_for(directory):
            try:
                self._check(deadline)
                meta = self.backend.put_directory_marker(user, dirname, timestamp,
                                                         marker_body(timestamp, name, child_etag))
                child_etag = meta[ETAG]
            except StorageError as err:
                logging.warning("%s [while updating directory marker '%s' of user '%s']" % (err, dirname, user))
                child_etag = None
            name = basename(dirname) + '/'

    def prune(self, user, directory, key, timestamp, deadline=None):
        """
        the document at directory/key was deleted: delete the markers of
        ancestors that became empty, update the others. the root marker is
        never deleted.
        """
        name, child_etag = key, None
        for dirname in parent_directories_for(directory):
            try:
                self._check(deadline)
                if dirname and not self.backend.has_children(user, dirname):
                    self.backend.delete_directory_marker(user, dirname)
                    child_etag = None
                else:
                    meta = self.backend.put_directory_marker(user, dirname, timestamp,
                                                             marker_body(timestamp, name, child_etag))
                    child_etag = meta[ETAG]
            except StorageError as err:
                logging.warning("%s [while pruning directory marker '%s' of user '%s']" % (err, dirname, user))
                child_etag = None
            name = basename(dirname) + '/'
