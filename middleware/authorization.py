# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - path authorization

A token is granted a list of authorizations, each "scope:permission" (or
just "scope", meaning read-write). A scope grants access to the directory
of the same name, everything below it and the same path below public/.
The empty scope is the root and applies to every path.
"""


import re

from config import READ, READWRITE, PUBLIC


def parse_authorizations(authorizations):
    """
    ["contacts:r", "photos"] -> {"contacts": "r", "photos": "rw"}
    """
    grants = {}
    for auth in authorizations:
        if ':' in auth:
            scope, permission = auth.rsplit(':', 1)
        else:
            scope, permission = auth, READWRITE
        grants[scope] = permission
    return grants


def _scope_matches(scope, directory):
    return re.match(r'^(%s/)?%s(/|$)' % (PUBLIC, re.escape(scope)), directory) is not None


def directory_permission(authorizations, directory):
    """
    most permissive permission the authorizations give on directory,
    None if none of them applies
    """
    grants = parse_authorizations(authorizations)
    permission = grants.get('')
    if permission not in (READ, READWRITE):
        permission = None
    for scope, value in sorted(grants.items()):
        if not scope or value not in (READ, READWRITE):
            continue
        if _scope_matches(scope, directory):
            if permission is None or permission == READ:
                permission = value
            if permission == READWRITE:
                # nothing is more permissive
                return permission
    return permission


def authorize(authorizations, directory, required):
    """
    do the authorizations give permission required (READ or READWRITE) on directory?
    """
    permission = directory_permission(authorizations, directory)
    if permission is None:
        return False
    if required == READWRITE:
        return permission == READWRITE
    return True


def is_public_read(directory, method, listing=False):
    """
    documents below public/ may be read by anyone, listings may not
    """
    return (directory.split('/')[0] == PUBLIC and
            method in ('GET', 'HEAD') and
            not listing)
