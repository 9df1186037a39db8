# Copyright: 2011 MoinMoin:RonnyPfannschmidt
# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - backend using a key/value bucket pair and a blob store

Documents are records at "user:directory:key" in the data bucket, indexed by
owning user and directory. Directory markers are records at "user:directory"
in the directory bucket, indexed by owning user and parent directory. Text
payloads are kept inline in the record, binary payloads go to the blob store
and the record only keeps a back-reference (BINARY_KEY). Key segments are
URL-quoted, so a ":" inside a directory or key name stays unambiguous.

The buckets are IndexedStores, authorizations live in a bytes store
("user:token" -> JSON list) and the blob store is a file store.
"""


import json
import logging
from io import BytesIO
from urllib.parse import quote
from uuid import uuid4

from config import NAME, ETAG, CONTENTTYPE, SIZE, TIMESTAMP, BINARY_KEY, META, VALUE, \
                   USER_INDEX, DIRECTORY_INDEX, ROOT_INDEX
from errors import NotFound, BackendUnavailable, CorruptState

from backend import MutableBackendBase
from backend._util import TrackingFileWrapper, make_etag, parent_directory_for, basename

make_uuid = lambda: str(uuid4().hex)


def _escape(segment):
    # ":" separates the key segments
    return quote(segment, safe='/')


def _document_key(user, directory, key):
    return '%s:%s:%s' % (_escape(user), _escape(directory), _escape(key))


def _directory_key(user, directory):
    return '%s:%s' % (_escape(user), _escape(directory))


def _directory_index(directory):
    return directory or ROOT_INDEX


def _document_child(key, record):
    meta = record.get(META)
    if not meta or ETAG not in meta:
        logging.warning("skipping document record without meta [while listing '%s']" % key)
        return []
    return [dict(meta)]


def _directory_child(key, record):
    meta = record.get(META)
    if not meta or ETAG not in meta:
        logging.warning("skipping directory record without meta [while listing '%s']" % key)
        return []
    child = dict(meta)
    child[NAME] = child[NAME] + '/'
    return [child]


class Backend(MutableBackendBase):
    """
    ties together the data / directory buckets, the authorization store and
    the blob store
    """
    def __init__(self, data_bucket, directory_bucket, auth_store, blob_store):
        self.data_bucket = data_bucket
        self.directory_bucket = directory_bucket
        self.auth_store = auth_store
        self.blob_store = blob_store

    def _stores(self):
        return [self.data_bucket, self.directory_bucket, self.auth_store, self.blob_store]

    def create(self):
        for store in self._stores():
            store.create()

    def destroy(self):
        for store in self._stores():
            store.destroy()

    def open(self):
        for store in self._stores():
            store.open()

    def close(self):
        for store in self._stores():
            store.close()

    def _retrieve(self, bucket, key):
        try:
            return bucket.retrieve(key)
        except CorruptState:
            raise
        except KeyError:
            raise NotFound(key)
        except EnvironmentError as err:
            raise BackendUnavailable("%s [while retrieving '%s']" % (err, key))

    def _meta(self, key, record):
        meta = record.get(META)
        if not isinstance(meta, dict) or ETAG not in meta:
            raise CorruptState("record '%s' has no valid meta" % key)
        return meta

    def get_authorizations(self, user, token):
        key = '%s:%s' % (user, token)
        try:
            authorizations = self.auth_store[key]
        except KeyError:
            return []
        except EnvironmentError as err:
            raise BackendUnavailable("%s [while reading authorizations of '%s']" % (err, user))
        try:
            authorizations = json.loads(authorizations.decode('utf-8'))
        except ValueError as err:
            raise CorruptState("%s [while decoding authorizations of '%s']" % (err, user))
        if not isinstance(authorizations, list):
            raise CorruptState("authorizations of '%s' are not a list" % user)
        return authorizations

    def _get_blob(self, binary_key):
        try:
            with self.blob_store[binary_key] as f:
                return f.read()
        except KeyError:
            raise CorruptState("blob '%s' is missing" % binary_key)
        except EnvironmentError as err:
            raise BackendUnavailable("%s [while reading blob '%s']" % (err, binary_key))

    def get_document(self, user, directory, key):
        doc_key = _document_key(user, directory, key)
        record = self._retrieve(self.data_bucket, doc_key)
        meta = self._meta(doc_key, record)
        if BINARY_KEY in meta:
            data = self._get_blob(meta[BINARY_KEY])
        elif VALUE in record:
            data = record[VALUE].encode('utf-8')
        else:
            raise CorruptState("record '%s' has neither value nor binary key" % doc_key)
        return meta, data

    def head_document(self, user, directory, key):
        doc_key = _document_key(user, directory, key)
        return self._meta(doc_key, self._retrieve(self.data_bucket, doc_key))

    def get_directory_marker(self, user, directory):
        dir_key = _directory_key(user, directory)
        return self._meta(dir_key, self._retrieve(self.directory_bucket, dir_key))

    def _child_keys(self, bucket, user, directory):
        try:
            user_keys = bucket.get_index(USER_INDEX, user)
            directory_keys = bucket.get_index(DIRECTORY_INDEX, _directory_index(directory))
        except EnvironmentError as err:
            raise BackendUnavailable("%s [while querying indexes of '%s']" % (err, directory))
        return user_keys & directory_keys

    def list_children(self, user, directory):
        doc_keys = self._child_keys(self.data_bucket, user, directory)
        dir_keys = self._child_keys(self.directory_bucket, user, directory)
        children = []
        try:
            if dir_keys:
                children.extend(self.directory_bucket.map(dir_keys, _directory_child))
            if doc_keys:
                children.extend(self.data_bucket.map(doc_keys, _document_child))
        except EnvironmentError as err:
            raise BackendUnavailable("%s [while listing '%s']" % (err, directory))
        return children

    def has_children(self, user, directory):
        return bool(self._child_keys(self.data_bucket, user, directory) or
                    self._child_keys(self.directory_bucket, user, directory))

    def _store_blob(self, data):
        binary_key = make_uuid()
        tfw = TrackingFileWrapper(BytesIO(data))
        self.blob_store[binary_key] = tfw
        return binary_key, tfw.hash.hexdigest(), tfw.size

    def _del_blob(self, binary_key):
        try:
            del self.blob_store[binary_key]
        except KeyError:
            logging.warning("blob '%s' already gone [while purging it]" % binary_key)

    def put_document(self, user, directory, key, data, content_type, timestamp, binary=False):
        doc_key = _document_key(user, directory, key)
        try:
            old_meta = self.head_document(user, directory, key)
        except (NotFound, CorruptState):
            old_meta = {}
        meta = {
            NAME: key,
            CONTENTTYPE: content_type,
            TIMESTAMP: timestamp,
        }
        record = {META: meta}
        try:
            if binary:
                meta[BINARY_KEY], meta[ETAG], meta[SIZE] = self._store_blob(data)
            else:
                record[VALUE] = data.decode('utf-8')
                meta[ETAG] = make_etag(data)
                meta[SIZE] = len(data)
            indexes = {USER_INDEX: [user], DIRECTORY_INDEX: [_directory_index(directory)]}
            self.data_bucket.store(doc_key, record, indexes)
            # the record does not reference the old blob any more
            if BINARY_KEY in old_meta:
                self._del_blob(old_meta[BINARY_KEY])
        except EnvironmentError as err:
            raise BackendUnavailable("%s [while storing '%s']" % (err, doc_key))
        return meta

    def delete_document(self, user, directory, key):
        doc_key = _document_key(user, directory, key)
        meta = self.head_document(user, directory, key)
        try:
            self.data_bucket.remove(doc_key)
            if BINARY_KEY in meta:
                self._del_blob(meta[BINARY_KEY])
        except KeyError:
            raise NotFound(doc_key)
        except EnvironmentError as err:
            raise BackendUnavailable("%s [while deleting '%s']" % (err, doc_key))

    def put_directory_marker(self, user, directory, timestamp, body):
        dir_key = _directory_key(user, directory)
        meta = {
            NAME: basename(directory),
            ETAG: make_etag(body),
            TIMESTAMP: timestamp,
        }
        indexes = {USER_INDEX: [user]}
        parent_directory = parent_directory_for(directory)
        if parent_directory is not None:
            indexes[DIRECTORY_INDEX] = [_directory_index(parent_directory)]
        try:
            self.directory_bucket.store(dir_key, {META: meta}, indexes)
        except EnvironmentError as err:
            raise BackendUnavailable("%s [while storing marker '%s']" % (err, dir_key))
        return meta

    def delete_directory_marker(self, user, directory):
        dir_key = _directory_key(user, directory)
        try:
            self.directory_bucket.remove(dir_key)
        except KeyError:
            raise NotFound(dir_key)
        except EnvironmentError as err:
            raise BackendUnavailable("%s [while deleting marker '%s']" % (err, dir_key))
