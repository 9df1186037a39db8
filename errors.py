# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - exceptions

Every exception knows the HTTP status the front-end shall answer with.
"""


class StorageError(Exception):
    status = 500


class Unauthorized(StorageError):
    status = 401


class NotFound(StorageError, KeyError):
    """
    document, directory or record does not exist

    also a KeyError, so code written against the stores keeps working.
    """
    status = 404

    def __str__(self):
        return Exception.__str__(self)


class NameCollision(StorageError):
    """
    a document would shadow a directory of the same name (or vice versa)
    """
    status = 409


class PreconditionFailed(StorageError):
    status = 412


class UnprocessablePayload(StorageError):
    status = 422


class BackendUnavailable(StorageError):
    """
    transport, timeout or auth failure while talking to a backend
    """
    status = 500


class CorruptState(StorageError):
    """
    stored metadata is missing or malformed
    """
    status = 500
