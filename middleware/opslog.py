# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - operations log

Appends one entry per document operation that changed the number of
documents or the stored size of a user, so usage per category can be
summed up later.
"""


import json
from uuid import uuid4

from config import PUBLIC

make_uuid = lambda: str(uuid4().hex)


def extract_category(directory):
    """
    u'contacts/work' -> u'contacts', u'public/photos/2012' -> u'public/photos'
    """
    parts = directory.split('/')
    if parts[0] == PUBLIC and len(parts) > 1:
        return '%s/%s' % (PUBLIC, parts[1])
    return parts[0]


class OperationLog(object):
    def __init__(self, store):
        """
        :param store: bytes store for the log entries
        """
        self.store = store

    def log(self, user, directory, count, new_size=0, old_size=0):
        size = new_size - old_size
        if count == 0 and size == 0:
            return
        entry = {
            "user": user,
            "count": count,
            "size": size,
            "category": extract_category(directory),
        }
        self.store[make_uuid()] = json.dumps(entry).encode('utf-8')

    def __iter__(self):
        for key in self.store:
            yield json.loads(self.store[key].decode('utf-8'))

    def usage(self, user):
        """
        :returns: dict category -> {"count": documents, "size": bytes}
        """
        result = {}
        for entry in self:
            if entry["user"] != user:
                continue
            totals = result.setdefault(entry["category"], {"count": 0, "size": 0})
            totals["count"] += entry["count"]
            totals["size"] += entry["size"]
        return result
