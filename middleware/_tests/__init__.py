# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - middleware tests
"""


from errors import BackendUnavailable


class FailingMarkers(object):
    """
    backend wrapper failing all marker writes of one directory
    """
    def __init__(self, backend, failing):
        self.backend = backend
        self.failing = failing

    def __getattr__(self, name):
        return getattr(self.backend, name)

    def put_directory_marker(self, user, directory, timestamp, body):
        if directory == self.failing:
            raise BackendUnavailable("marker store is down")
        return self.backend.put_directory_marker(user, directory, timestamp, body)
