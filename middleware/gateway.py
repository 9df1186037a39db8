# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - request handling

The HTTP front-end parses a request and calls one method of StorageGateway
per request. Methods return a Response (status, body, headers) or raise a
StorageError, which knows its HTTP status.

write: authorization -> name collision -> preconditions -> classification
       -> store document -> directory tree update
read:  authorization -> fetch -> preconditions (304)
list:  authorization -> listing
"""


import json
import logging
import time
from collections import namedtuple

from werkzeug.http import http_date, quote_etag

from config import READ, READWRITE, ETAG, CONTENTTYPE, SIZE, TIMESTAMP, \
                   DEFAULT_CONTENTTYPE, JSON_CONTENTTYPE, REQUEST_TIMEOUT
from errors import StorageError, Unauthorized, NotFound, NameCollision, PreconditionFailed, \
                   BackendUnavailable

from backend._util import now_ms

from middleware.authorization import authorize, is_public_read
from middleware.conditional import evaluate_read, evaluate_write, \
                                   NOT_MODIFIED, PRECONDITION_FAILED, NOT_FOUND
from middleware.content import prepare_payload, BINARY
from middleware.listing import ListingAggregator
from middleware.tree import DirectoryTree

Response = namedtuple('Response', 'status body headers')


class Deadline(object):
    """
    overall time budget of one request
    """
    def __init__(self, timeout, clock=time.monotonic):
        self.clock = clock
        self.expires_at = clock() + timeout if timeout else None

    def expired(self):
        return self.expires_at is not None and self.clock() > self.expires_at

    def check(self):
        if self.expired():
            raise BackendUnavailable("request deadline exceeded")


def _document_headers(meta):
    headers = {"ETag": quote_etag(meta[ETAG])}
    if meta.get(CONTENTTYPE):
        headers["Content-Type"] = meta[CONTENTTYPE]
    if meta.get(SIZE) is not None:
        headers["Content-Length"] = str(meta[SIZE])
    if meta.get(TIMESTAMP):
        headers["Last-Modified"] = http_date(meta[TIMESTAMP] / 1000)
    return headers


class StorageGateway(object):
    def __init__(self, backend, opslog=None, timeout=REQUEST_TIMEOUT, clock=time.time,
                 deadline_clock=time.monotonic):
        """
        :param backend: opened MutableBackendBase
        :param opslog: OperationLog or None
        :param timeout: seconds one request may take, None for no limit
        :param clock: time source for document timestamps (seconds)
        :param deadline_clock: time source for request deadlines (seconds)
        """
        self.backend = backend
        self.opslog = opslog
        self.timeout = timeout
        self.clock = clock
        self.deadline_clock = deadline_clock
        self.tree = DirectoryTree(backend)
        self.listing = ListingAggregator(backend)

    def _deadline(self):
        return Deadline(self.timeout, self.deadline_clock)

    def authorize(self, user, directory, token, method='GET', listing=False):
        """
        may the bearer of token do method on directory of user?
        """
        if is_public_read(directory, method, listing):
            return True
        if not token:
            return False
        authorizations = self.backend.get_authorizations(user, token)
        required = READWRITE if method in ('PUT', 'DELETE') else READ
        return authorize(authorizations, directory, required)

    def authorize_request(self, user, directory, token, method='GET', listing=False):
        if not self.authorize(user, directory, token, method, listing):
            raise Unauthorized("%s %s/%s" % (method, user, directory))

    def get_head(self, user, directory, key, if_none_match=None):
        deadline = self._deadline()
        meta = self.backend.head_document(user, directory, key)
        deadline.check()
        headers = _document_headers(meta)
        if evaluate_read(if_none_match, meta[ETAG]) == NOT_MODIFIED:
            return Response(304, None, headers)
        return Response(200, None, headers)

    def get_document(self, user, directory, key, if_none_match=None):
        deadline = self._deadline()
        meta, data = self.backend.get_document(user, directory, key)
        deadline.check()
        headers = _document_headers(meta)
        headers["Content-Length"] = str(len(data))
        if evaluate_read(if_none_match, meta[ETAG]) == NOT_MODIFIED:
            return Response(304, None, headers)
        return Response(200, data, headers)

    def _listing(self, user, directory, if_none_match):
        deadline = self._deadline()
        listing = self.listing.get(user, directory, deadline)
        deadline.check()
        headers = {
            "Content-Type": JSON_CONTENTTYPE,
            "ETag": quote_etag(listing[ETAG]),
        }
        if listing[TIMESTAMP]:
            headers["Last-Modified"] = http_date(listing[TIMESTAMP] / 1000)
        not_modified = evaluate_read(if_none_match, listing[ETAG]) == NOT_MODIFIED
        return listing, headers, not_modified

    def get_head_listing(self, user, directory, if_none_match=None):
        listing, headers, not_modified = self._listing(user, directory, if_none_match)
        return Response(304 if not_modified else 200, None, headers)

    def get_listing(self, user, directory, if_none_match=None):
        listing, headers, not_modified = self._listing(user, directory, if_none_match)
        if not_modified:
            return Response(304, None, headers)
        body = json.dumps(self.listing.describe(listing)).encode('utf-8')
        headers["Content-Length"] = str(len(body))
        return Response(200, body, headers)

    def _existing(self, user, directory, key):
        try:
            return self.backend.head_document(user, directory, key)
        except NotFound:
            return None

    def _log(self, user, directory, count, new_size=0, old_size=0):
        if self.opslog is None:
            return
        try:
            self.opslog.log(user, directory, count, new_size, old_size)
        except (EnvironmentError, StorageError) as err:
            logging.warning("%s [while logging operation of user '%s' in '%s']" % (err, user, directory))

    def put_document(self, user, directory, key, data, content_type=None,
                     if_match=None, if_none_match=None):
        """
        create or overwrite a document, 201 if it was created, 200 if it was updated
        """
        deadline = self._deadline()
        content_type = content_type or DEFAULT_CONTENTTYPE
        if self.backend.has_name_collision(user, directory, key):
            raise NameCollision("%s/%s" % (directory, key))
        deadline.check()
        old_meta = self._existing(user, directory, key)
        old_etag = old_meta[ETAG] if old_meta else None
        if evaluate_write(if_match, if_none_match, old_etag, old_meta is not None) == PRECONDITION_FAILED:
            raise PreconditionFailed("%s/%s" % (directory, key))
        kind, data = prepare_payload(content_type, data)
        deadline.check()
        timestamp = now_ms(self.clock)
        meta = self.backend.put_document(user, directory, key, data, content_type, timestamp,
                                         binary=kind == BINARY)
        self.tree.update(user, directory, key, meta[ETAG], timestamp, deadline)
        if old_meta:
            self._log(user, directory, 0, meta[SIZE], old_meta.get(SIZE) or 0)
        else:
            self._log(user, directory, 1, meta[SIZE])
        return Response(200 if old_meta else 201, None, {"ETag": quote_etag(meta[ETAG])})

    def delete_document(self, user, directory, key, if_match=None):
        deadline = self._deadline()
        old_meta = self._existing(user, directory, key)
        old_etag = old_meta[ETAG] if old_meta else None
        action = evaluate_write(if_match, None, old_etag, old_meta is not None, must_exist=True)
        if action == NOT_FOUND:
            raise NotFound("%s/%s" % (directory, key))
        if action == PRECONDITION_FAILED:
            raise PreconditionFailed("%s/%s" % (directory, key))
        deadline.check()
        self.backend.delete_document(user, directory, key)
        self.tree.prune(user, directory, key, now_ms(self.clock), deadline)
        self._log(user, directory, -1, 0, old_meta.get(SIZE) or 0)
        return Response(200, None, {})
