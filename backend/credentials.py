# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - refreshable credentials

The object store auth token is issued by an external process that rewrites
a token file from time to time. We re-read it when it is older than max_age
or after somebody told us it was rejected.
"""


import logging
import threading
import time

from config import TOKEN_MAX_AGE
from errors import BackendUnavailable


class RefreshableToken(object):
    def __init__(self, path, max_age=TOKEN_MAX_AGE, clock=time.time):
        """
        :param path: file containing the token
        :param max_age: seconds after which the file is re-read
        :param clock: time source (seconds), for tests
        """
        self.path = path
        self.max_age = max_age
        self.clock = clock
        self._token = None
        self._loaded_at = None
        self._lock = threading.Lock()

    def _stale(self):
        return self._loaded_at is None or self.clock() - self._loaded_at > self.max_age

    def reload(self):
        logging.debug("Reloading token from %s. Old token loaded at: %s" % (self.path, self._loaded_at))
        try:
            with open(self.path, 'r') as f:
                token = f.read().strip()
        except IOError as err:
            raise BackendUnavailable("%s [while reading token file '%s']" % (err, self.path))
        self._token = token
        self._loaded_at = self.clock()
        logging.debug("Reloaded token from %s." % self.path)

    def invalidate(self):
        """
        force a reload on next access (e.g. the backend rejected the token)
        """
        with self._lock:
            self._loaded_at = None

    @property
    def token(self):
        with self._lock:
            if self._stale():
                self.reload()
            return self._token
