# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - directory listings

Merges the documents and subdirectories directly inside a directory into one
listing. A non-root directory listing has the etag of the directory marker,
the root listing etag is computed from its children on every request.
"""


from config import NAME, ETAG, CONTENTTYPE, SIZE, TIMESTAMP, FOLDER_DESCRIPTION
from errors import NotFound

from backend._util import etag_for


def _item(child):
    item = {"ETag": child.get(ETAG)}
    if not child[NAME].endswith('/'):
        if child.get(CONTENTTYPE) is not None:
            item["Content-Type"] = child[CONTENTTYPE]
        if child.get(SIZE) is not None:
            item["Content-Length"] = child[SIZE]
    return item


class ListingAggregator(object):
    def __init__(self, backend):
        self.backend = backend

    def get(self, user, directory, deadline=None):
        """
        :returns: dict with "items" (name -> item, sorted by name), ETAG and
                  TIMESTAMP (None if unknown)
        :raises NotFound: a non-root directory has no marker
        :raises BackendUnavailable: deadline expired
        """
        if directory:
            marker = self.backend.get_directory_marker(user, directory)
        else:
            try:
                marker = self.backend.get_directory_marker(user, directory)
            except NotFound:
                marker = {}
        if deadline is not None:
            deadline.check()
        children = self.backend.list_children(user, directory)
        # documents win over subdirectories of the same name
        subdirectories = [c for c in children if c[NAME].endswith('/')]
        documents = [c for c in children if not c[NAME].endswith('/')]
        merged = {}
        for child in subdirectories + documents:
            merged[child[NAME]] = child
        items = dict((name, _item(merged[name])) for name in sorted(merged))
        if directory:
            etag = marker[ETAG]
        else:
            etag = etag_for(['%s %s' % (name, item["ETag"]) for name, item in items.items()])
        return {
            "items": items,
            ETAG: etag,
            TIMESTAMP: marker.get(TIMESTAMP),
        }

    def describe(self, listing):
        """
        folder description (response body) of a listing
        """
        return {
            "@context": FOLDER_DESCRIPTION,
            "items": listing["items"],
        }
