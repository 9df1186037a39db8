# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - path authorization tests
"""


import pytest

from config import READ, READWRITE

from ..authorization import parse_authorizations, directory_permission, authorize, is_public_read


def test_parse_authorizations():
    grants = parse_authorizations(['contacts:r', 'photos', ':rw'])
    assert grants == {'contacts': READ, 'photos': READWRITE, '': READWRITE}


@pytest.mark.parametrize('authorizations,directory,expected', [
    (['contacts:r'], 'contacts', READ),
    (['contacts:r'], 'contacts/work', READ),
    (['contacts:r'], 'public/contacts/work', READ),
    (['contacts:r'], 'contactsandmore', None),
    (['contacts:r'], 'documents', None),
    (['contacts:r'], '', None),
    (['contacts:r', 'contacts/work:rw'], 'contacts/work/x', READWRITE),
    (['contacts:r', 'contacts/work:rw'], 'contacts/home', READ),
    ([':r'], 'anything/at/all', READ),
    ([':r', 'documents:rw'], 'documents/a', READWRITE),
    ([':rw', 'documents:r'], 'documents/a', READWRITE),
    (['documents'], 'documents', READWRITE),
    ([], 'documents', None),
])
def test_directory_permission(authorizations, directory, expected):
    assert directory_permission(authorizations, directory) == expected


def test_scopes_are_literal():
    # regex characters in a scope name do not widen it
    assert directory_permission(['a.c:rw'], 'abc') is None
    assert directory_permission(['a.c:rw'], 'a.c/x') == READWRITE


def test_never_more_permissive_than_grants():
    authorizations = ['contacts:r', 'public/photos:r', 'documents:rw']
    for directory in ['contacts', 'contacts/x', 'public/photos', 'public/contacts', 'photos']:
        assert directory_permission(authorizations, directory) != READWRITE


def test_authorize():
    authorizations = ['contacts:r', 'documents:rw']
    assert authorize(authorizations, 'contacts/work', READ)
    assert not authorize(authorizations, 'contacts/work', READWRITE)
    assert authorize(authorizations, 'documents', READWRITE)
    assert not authorize(authorizations, 'photos', READ)


@pytest.mark.parametrize('directory,method,listing,expected', [
    ('public/photos', 'GET', False, True),
    ('public', 'HEAD', False, True),
    ('public/photos', 'GET', True, False),
    ('public/photos', 'PUT', False, False),
    ('public/photos', 'DELETE', False, False),
    ('publicity', 'GET', False, False),
    ('photos/public', 'GET', False, False),
])
def test_is_public_read(directory, method, listing, expected):
    assert is_public_read(directory, method, listing) == expected


def test_unknown_permissions_grant_nothing():
    assert directory_permission([':x'], 'documents') is None
    assert directory_permission(['documents:x'], 'documents') is None
    assert not authorize(['documents:w'], 'documents', READ)
