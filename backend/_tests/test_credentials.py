# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - refreshable credentials tests
"""


import pytest

from errors import BackendUnavailable

from backend.credentials import RefreshableToken


class Clock(object):
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def test_token_is_read_lazily(tmpdir):
    path = tmpdir.join('token.txt')
    path.write('first\n')
    token = RefreshableToken(str(path), clock=Clock())
    assert token._loaded_at is None
    assert token.token == 'first'


def test_token_is_reloaded_when_stale(tmpdir):
    path = tmpdir.join('token.txt')
    path.write('first')
    clock = Clock(100.0)
    token = RefreshableToken(str(path), max_age=3600, clock=clock)
    assert token.token == 'first'
    path.write('second')
    clock.now += 3600
    assert token.token == 'first'
    clock.now += 1
    assert token.token == 'second'


def test_invalidate(tmpdir):
    path = tmpdir.join('token.txt')
    path.write('first')
    token = RefreshableToken(str(path), clock=Clock())
    assert token.token == 'first'
    path.write('second')
    token.invalidate()
    assert token.token == 'second'


def test_missing_token_file(tmpdir):
    token = RefreshableToken(str(tmpdir.join('missing.txt')))
    with pytest.raises(BackendUnavailable):
        token.token
