# Copyright: 2011 MoinMoin:RonnyPfannschmidt
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - test magic

The backend fixture runs a test once per binding.
"""


import json

import pytest

from backend.kvblob import Backend as KVBlobBackend
from backend.swift import Backend as SwiftBackend
from backend.credentials import RefreshableToken
from backend._tests.fakes import FakeRedis, FakeSwift, BASE_URL, TOKEN

from stores.memory import BytesStore, FileStore
from stores.wrappers import IndexedStore

from middleware.gateway import StorageGateway
from middleware.opslog import OperationLog

bindings = 'kvblob swift'.split()


def make_kvblob(tmpdir):
    return KVBlobBackend(IndexedStore(BytesStore(), BytesStore()),
                         IndexedStore(BytesStore(), BytesStore()),
                         BytesStore(),
                         FileStore())


def make_swift(tmpdir):
    token_file = tmpdir.join('swift_token.txt')
    token_file.write(TOKEN)
    be = SwiftBackend(BASE_URL, RefreshableToken(str(token_file)), FakeRedis(),
                      client=FakeSwift().client())
    return be


constructors = {
    'kvblob': make_kvblob,
    'swift': make_swift,
}


@pytest.fixture(params=bindings)
def backend(request, tmpdir):
    be = constructors[request.param](tmpdir)
    be.create()
    be.open()
    yield be
    be.close()
    be.destroy()


@pytest.fixture
def grant(backend):
    """
    grant(user, token, authorizations) gives token the authorizations
    """
    def grant(user, token, authorizations):
        if isinstance(backend, SwiftBackend):
            backend.redis.sadd('authorizations:%s:%s' % (user, token), *authorizations)
        else:
            backend.auth_store['%s:%s' % (user, token)] = json.dumps(authorizations).encode('utf-8')
    return grant


class Clock(object):
    """
    deterministic time source, advances one second per call
    """
    def __init__(self, now=1400000000.0):
        self.now = now

    def __call__(self):
        self.now += 1.0
        return self.now


@pytest.fixture
def opslog():
    store = BytesStore()
    store.create()
    return OperationLog(store)


@pytest.fixture
def gateway(backend, opslog):
    return StorageGateway(backend, opslog=opslog, clock=Clock())
