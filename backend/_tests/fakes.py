# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - in-memory doubles of an object store and redis
"""


import hashlib
import time
from urllib.parse import unquote

import httpx
from redis.exceptions import ConnectionError as RedisConnectionError
from werkzeug.http import http_date

BASE_URL = 'http://swift.test/v1/AUTH_rs'
TOKEN = 'swift-token'


class FakeRedis(object):
    """
    the part of the redis client API the swift backend uses
    (decode_responses=True semantics)
    """
    def __init__(self):
        self.data = {}
        self.broken = False

    def _check(self):
        if self.broken:
            raise RedisConnectionError("redis is down")

    def hset(self, name, key=None, value=None, mapping=None):
        self._check()
        h = self.data.setdefault(name, {})
        if key is not None:
            h[key] = str(value)
        for k, v in (mapping or {}).items():
            h[k] = str(v)
        return 1

    def hgetall(self, name):
        self._check()
        return dict(self.data.get(name, {}))

    def sadd(self, name, *values):
        self._check()
        s = self.data.setdefault(name, set())
        before = len(s)
        s.update(str(v) for v in values)
        return len(s) - before

    def srem(self, name, *values):
        self._check()
        s = self.data.get(name, set())
        before = len(s)
        s.difference_update(values)
        if not s:
            self.data.pop(name, None)
        return before - len(s)

    def smembers(self, name):
        self._check()
        return set(self.data.get(name, set()))

    def delete(self, *names):
        self._check()
        return len([self.data.pop(name) for name in names if name in self.data])

    def exists(self, *names):
        self._check()
        return len([name for name in names if name in self.data])


class FakeSwift(object):
    """
    objects of all containers below BASE_URL, served via httpx.MockTransport
    """
    def __init__(self, token=TOKEN):
        self.token = token
        self.objects = {} # (container, name) -> (body, content_type, timestamp meta, mtime)
        self.requests = []

    def transport(self):
        return httpx.MockTransport(self.handle)

    def client(self):
        return httpx.Client(transport=self.transport())

    def _split(self, request):
        prefix = httpx.URL(BASE_URL).path + '/'
        path = request.url.path
        assert path.startswith(prefix), path
        container, _, name = path[len(prefix):].partition('/')
        return unquote(container), unquote(name)

    def _headers(self, body, content_type, timestamp, mtime):
        headers = {
            'ETag': hashlib.md5(body).hexdigest(),
            'Content-Type': content_type,
            'Content-Length': str(len(body)),
            'Last-Modified': http_date(mtime),
        }
        if timestamp:
            headers['X-Object-Meta-Timestamp'] = timestamp
        return headers

    def _listing(self, container, params):
        path = params.get('path', '')
        limit = int(params.get('limit', 10000))
        entries = []
        for (c, name), (body, content_type, timestamp, mtime) in sorted(self.objects.items()):
            if c != container or not name.startswith(path) or name == path:
                continue
            rest = name[len(path):]
            if '/' in rest[:-1]:
                continue
            entries.append({
                'name': name,
                'hash': hashlib.md5(body).hexdigest(),
                'bytes': len(body),
                'content_type': content_type,
            })
        return httpx.Response(200, json=entries[:limit])

    def handle(self, request):
        self.requests.append((request.method, str(request.url)))
        if request.headers.get('x-auth-token') != self.token:
            return httpx.Response(401)
        container, name = self._split(request)
        if not name:
            if request.method == 'GET':
                return self._listing(container, request.url.params)
            return httpx.Response(204)
        key = (container, name)
        if request.method == 'PUT':
            body = request.read()
            mtime = time.time()
            self.objects[key] = (body, request.headers.get('content-type', 'application/octet-stream'),
                                 request.headers.get('x-object-meta-timestamp'), mtime)
            return httpx.Response(201, headers={'ETag': hashlib.md5(body).hexdigest()})
        if key not in self.objects:
            return httpx.Response(404)
        if request.method == 'DELETE':
            del self.objects[key]
            return httpx.Response(204)
        body, content_type, timestamp, mtime = self.objects[key]
        headers = self._headers(body, content_type, timestamp, mtime)
        if request.method == 'HEAD':
            return httpx.Response(200, headers=headers)
        return httpx.Response(200, headers=headers, content=body)

    def names(self, container):
        return sorted(name for c, name in self.objects if c == container)
