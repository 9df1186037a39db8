# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - backend using a flat object store (OpenStack Swift)

Documents are objects at <container>/<directory>/<key>, one container per
user. Directory markers are objects at <container>/<directory>/ whose body
records the last change beneath them, so the object store's own listing
(?format=json&path=...) shows subdirectories next to documents. The root
directory is the container itself and has no marker object.

The object store has no secondary indexes, so a Redis cache index keeps the
children of every directory and their metadata:

 rs_meta:<user>:<directory>/<key>      hash: etag, size, type, modified
 rs_meta:<user>:<directory>/           hash: etag, modified (marker)
 rs_meta:<user>:<directory>/:items     set of child names (subdirs end with /)

The cache is only an accelerator. Failures talking to Redis are logged and
never fail a request, and whenever the cache misses or looks incomplete we
list from the object store and refill it. A cache key whose write failed is
remembered as stale (per process) and not trusted again until it got
rewritten completely: hashes by the next successful write, items sets only
by a refill from the object store. Grants are Redis sets at
authorizations:<user>:<token>.

The Redis client must be created with decode_responses=True.
"""


import logging
from urllib.parse import quote

import httpx
from redis.exceptions import RedisError
from werkzeug.http import parse_date, unquote_etag

from config import NAME, ETAG, CONTENTTYPE, SIZE, TIMESTAMP, DEFAULT_CONTENTTYPE, REQUEST_TIMEOUT
from errors import NotFound, BackendUnavailable, CorruptState

from backend import MutableBackendBase
from backend._util import make_etag, parent_directories_for, parent_directory_for, basename


def _key_path(directory, key):
    if directory:
        return '%s/%s' % (directory, key)
    return key


def _item_key(user, path):
    return 'rs_meta:%s:%s' % (user, path)


def _marker_key(user, directory):
    return 'rs_meta:%s:%s/' % (user, directory)


def _items_key(user, directory):
    return _marker_key(user, directory) + ':items'


def _http_timestamp(value):
    """
    HTTP date -> ms since epoch (or None)
    """
    dt = parse_date(value) if value else None
    if dt is None:
        return None
    return int(dt.timestamp() * 1000)


class Backend(MutableBackendBase):
    def __init__(self, base_url, token, redis, environment='production', client=None,
                 timeout=REQUEST_TIMEOUT):
        """
        :param base_url: object store account url, e.g. https://swift.example.org/v1/AUTH_rs
        :param token: RefreshableToken giving the X-Auth-Token
        :param redis: redis client (cache index and grants)
        :param environment: deployment environment, its initial is part of container names
        :param client: httpx.Client to use (default: create one in open())
        :param timeout: httpx timeout (seconds) for a client we create
        """
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.redis = redis
        self.environment = environment
        self.client = client
        self.timeout = timeout
        self._own_client = client is None
        self._stale = set() # redis keys we failed to update

    def create(self):
        # containers are provisioned when the user account is created
        pass

    def destroy(self):
        pass

    def open(self):
        if self.client is None:
            self.client = httpx.Client(timeout=self.timeout)

    def close(self):
        if self._own_client and self.client is not None:
            self.client.close()
            self.client = None

    def _container_url(self, user):
        container = 'rs:%s:%s' % (self.environment[:1], user)
        return '%s/%s' % (self.base_url, quote(container, safe=':'))

    def _url(self, user, path):
        # spaces turn into %20, slashes stay slashes
        return '%s/%s' % (self._container_url(user), quote(path, safe='/'))

    def _request(self, method, url, headers=None, **kw):
        headers = dict(headers or {})
        headers['X-Auth-Token'] = self.token.token
        try:
            response = self.client.request(method, url, headers=headers, **kw)
        except httpx.HTTPError as err:
            raise BackendUnavailable("%s [while %s %s]" % (err, method, url))
        status = response.status_code
        if status in (401, 403):
            self.token.invalidate()
            logging.error("object store rejected our token (%d) [while %s %s]" % (status, method, url))
            raise BackendUnavailable("object store rejected token")
        if status == 404:
            raise NotFound(url)
        if status >= 400:
            raise BackendUnavailable("object store answered %d [while %s %s]" % (status, method, url))
        return response

    def _exists(self, url):
        try:
            self._request('HEAD', url)
        except NotFound:
            return False
        return True

    def _etag(self, response, default=None):
        etag = response.headers.get('etag')
        if etag is None:
            return default
        return unquote_etag(etag)[0]

    def _document_meta(self, key, response):
        headers = response.headers
        etag = self._etag(response)
        if etag is None:
            raise CorruptState("object store sent no etag for '%s'" % key)
        try:
            size = int(headers.get('content-length', 0))
            timestamp = headers.get('x-object-meta-timestamp')
            timestamp = int(timestamp) if timestamp else _http_timestamp(headers.get('last-modified'))
        except ValueError as err:
            raise CorruptState("%s [while reading metadata of '%s']" % (err, key))
        return {
            NAME: key,
            ETAG: etag,
            CONTENTTYPE: headers.get('content-type'),
            SIZE: size,
            TIMESTAMP: timestamp,
        }

    def _cache(self, what, func, key, *args, fresh=False, **kw):
        """
        func(key, *args, **kw) on redis, None if redis failed

        :param fresh: func leaves key completely up to date (a stale key
                      becomes trustworthy again)
        """
        try:
            result = func(key, *args, **kw)
        except RedisError as err:
            logging.warning("%s [while %s]" % (err, what))
            self._stale.add(key)
            return None
        if fresh:
            self._stale.discard(key)
        return result

    def _is_stale(self, key):
        return key in self._stale

    def get_authorizations(self, user, token):
        try:
            authorizations = self.redis.smembers('authorizations:%s:%s' % (user, token))
        except RedisError as err:
            raise BackendUnavailable("%s [while reading authorizations of '%s']" % (err, user))
        return sorted(authorizations)

    def get_document(self, user, directory, key):
        response = self._request('GET', self._url(user, _key_path(directory, key)))
        return self._document_meta(key, response), response.content

    def head_document(self, user, directory, key):
        response = self._request('HEAD', self._url(user, _key_path(directory, key)))
        return self._document_meta(key, response)

    def _cache_item(self, user, directory, meta):
        name = meta[NAME]
        mapping = {'etag': meta[ETAG]}
        if meta.get(TIMESTAMP):
            # object store listings carry no timestamp, keep the cached one
            mapping['modified'] = meta[TIMESTAMP]
        if not name.endswith('/'):
            mapping['size'] = meta.get(SIZE) or 0
            mapping['type'] = meta.get(CONTENTTYPE) or ''
        self._cache("caching metadata of '%s'" % name,
                    self.redis.hset, _item_key(user, _key_path(directory, name)), mapping=mapping,
                    fresh=True)
        self._cache("adding '%s' to the items of '%s'" % (name, directory),
                    self.redis.sadd, _items_key(user, directory), name)

    def _cache_marker(self, user, directory, meta):
        mapping = {'etag': meta[ETAG], 'modified': meta.get(TIMESTAMP) or 0}
        self._cache("caching marker of '%s'" % directory,
                    self.redis.hset, _marker_key(user, directory), mapping=mapping, fresh=True)
        parent_directory = parent_directory_for(directory)
        if parent_directory is not None:
            self._cache("adding '%s' to the items of '%s'" % (directory, parent_directory),
                        self.redis.sadd, _items_key(user, parent_directory), basename(directory) + '/')

    def get_directory_marker(self, user, directory):
        marker_key = _marker_key(user, directory)
        cached = None
        if not self._is_stale(marker_key):
            try:
                cached = self.redis.hgetall(marker_key)
            except RedisError as err:
                logging.warning("%s [while reading marker of '%s']" % (err, directory))
        if cached and 'etag' in cached:
            try:
                timestamp = int(cached.get('modified') or 0) or None
            except ValueError:
                timestamp = None
            return {NAME: basename(directory), ETAG: cached['etag'], TIMESTAMP: timestamp}
        if not directory:
            raise NotFound("root marker of '%s'" % user)
        response = self._request('GET', self._url(user, directory + '/'))
        # the marker body starts with the timestamp of the last change
        try:
            timestamp = int(response.content.split(b' ', 1)[0])
        except ValueError:
            timestamp = _http_timestamp(response.headers.get('last-modified'))
        meta = {
            NAME: basename(directory),
            ETAG: self._etag(response, make_etag(response.content)),
            TIMESTAMP: timestamp,
        }
        self._cache_marker(user, directory, meta)
        return meta

    def _cached_children(self, user, directory):
        """
        children according to the cache index, None if the cache has nothing
        (or something incomplete) for directory
        """
        items_key = _items_key(user, directory)
        if self._is_stale(items_key):
            return None
        try:
            names = self.redis.smembers(items_key)
            if not names:
                return None
            children = []
            for name in sorted(names):
                item_key = _item_key(user, _key_path(directory, name))
                if self._is_stale(item_key):
                    return None
                cached = self.redis.hgetall(item_key)
                if not cached or 'etag' not in cached:
                    logging.info("cache index of '%s' lacks '%s', listing from object store" % (directory, name))
                    return None
                child = {NAME: name, ETAG: cached['etag']}
                if int(cached.get('modified') or 0):
                    child[TIMESTAMP] = int(cached['modified'])
                if not name.endswith('/'):
                    child[CONTENTTYPE] = cached.get('type') or DEFAULT_CONTENTTYPE
                    child[SIZE] = int(cached.get('size') or 0)
                children.append(child)
            return children
        except RedisError as err:
            logging.warning("%s [while reading cache index of '%s']" % (err, directory))
        except ValueError as err:
            logging.warning("%s [while decoding cache index of '%s']" % (err, directory))
        return None

    def _stored_children(self, user, directory, limit=None):
        """
        children according to the object store listing
        """
        prefix = directory + '/' if directory else ''
        params = {'format': 'json', 'path': prefix}
        if limit:
            params['limit'] = limit
        try:
            response = self._request('GET', self._container_url(user), params=params)
        except NotFound:
            return []
        try:
            entries = response.json()
        except ValueError as err:
            raise CorruptState("%s [while decoding listing of '%s']" % (err, directory))
        children = []
        for entry in entries:
            name = entry.get('name', '')
            if not name.startswith(prefix) or name == prefix:
                continue
            name = name[len(prefix):]
            child = {NAME: name, ETAG: entry.get('hash')}
            if not name.endswith('/'):
                child[CONTENTTYPE] = entry.get('content_type')
                child[SIZE] = entry.get('bytes')
            children.append(child)
        return children

    def list_children(self, user, directory):
        children = self._cached_children(user, directory)
        if children is None:
            children = self._stored_children(user, directory)
            # start over, the items set may hold names that are gone
            self._cache("resetting the items of '%s'" % directory,
                        self.redis.delete, _items_key(user, directory), fresh=True)
            for child in children:
                self._cache_item(user, directory, child)
        return children

    def has_children(self, user, directory):
        # the cache may lag behind, ask the object store
        return bool(self._stored_children(user, directory, limit=1))

    def has_name_collision(self, user, directory, key):
        # an existing directory with the same name as the document
        if self._exists(self._url(user, _key_path(directory, key) + '/')):
            return True
        # an existing document with the same name as one of the parent directories
        for dirname in parent_directories_for(directory):
            if not dirname:
                break
            if self._exists(self._url(user, dirname + '/')):
                return False
            if self._exists(self._url(user, dirname)):
                return True
        return False

    def put_document(self, user, directory, key, data, content_type, timestamp, binary=False):
        # the object store keeps binary and text payloads alike
        headers = {
            'Content-Type': content_type,
            'X-Object-Meta-Timestamp': str(timestamp),
        }
        response = self._request('PUT', self._url(user, _key_path(directory, key)),
                                 content=data, headers=headers)
        meta = {
            NAME: key,
            ETAG: self._etag(response, make_etag(data)),
            CONTENTTYPE: content_type,
            SIZE: len(data),
            TIMESTAMP: timestamp,
        }
        self._cache_item(user, directory, meta)
        return meta

    def delete_document(self, user, directory, key):
        self._request('DELETE', self._url(user, _key_path(directory, key)))
        self._cache("forgetting metadata of '%s'" % key,
                    self.redis.delete, _item_key(user, _key_path(directory, key)), fresh=True)
        self._cache("removing '%s' from the items of '%s'" % (key, directory),
                    self.redis.srem, _items_key(user, directory), key)

    def put_directory_marker(self, user, directory, timestamp, body):
        if directory:
            response = self._request('PUT', self._url(user, directory + '/'),
                                     content=body, headers={'Content-Type': 'text/plain'})
            etag = self._etag(response, make_etag(body))
        else:
            # the root is the container itself, its marker only lives in the cache
            etag = make_etag(body)
        meta = {NAME: basename(directory), ETAG: etag, TIMESTAMP: timestamp}
        self._cache_marker(user, directory, meta)
        return meta

    def delete_directory_marker(self, user, directory):
        if not directory:
            return
        try:
            self._request('DELETE', self._url(user, directory + '/'))
        except NotFound:
            pass
        self._cache("forgetting marker of '%s'" % directory,
                    self.redis.delete, _marker_key(user, directory), fresh=True)
        self._cache("forgetting the items of '%s'" % directory,
                    self.redis.delete, _items_key(user, directory), fresh=True)
        parent_directory = parent_directory_for(directory)
        self._cache("removing '%s' from the items of '%s'" % (directory, parent_directory),
                    self.redis.srem, _items_key(user, parent_directory), basename(directory) + '/')
