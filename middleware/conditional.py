# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - conditional request evaluation

Compares If-Match / If-None-Match request headers against the current etag
of a resource. Reads and writes use different subsets of the rules, both go
through evaluate().
"""


from werkzeug.http import parse_etags

PROCEED = 'proceed'
NOT_MODIFIED = 'not_modified'
PRECONDITION_FAILED = 'precondition_failed'
NOT_FOUND = 'not_found'

READ_MODE = 'read'
WRITE_MODE = 'write'


def etag_matches(header, etag):
    """
    does an If-Match / If-None-Match header value contain etag?

    header may be a list of quoted or bare tags or "*" (matches any
    existing resource).
    """
    if not header or etag is None:
        return False
    return parse_etags(header).contains(etag)


def _is_star(header):
    return header is not None and header.strip() == '*'


def evaluate(if_match=None, if_none_match=None, etag=None, exists=True,
             must_exist=False, mode=WRITE_MODE):
    """
    :param if_match: If-Match header value or None
    :param if_none_match: If-None-Match header value or None
    :param etag: current etag of the resource (None if it does not exist)
    :param exists: does the resource exist?
    :param must_exist: the operation needs an existing resource
    :param mode: READ_MODE or WRITE_MODE
    :returns: one of PROCEED, NOT_MODIFIED, PRECONDITION_FAILED, NOT_FOUND
    """
    if must_exist and not exists:
        return NOT_FOUND
    if if_match is not None and not (exists and etag_matches(if_match, etag)):
        return PRECONDITION_FAILED
    if mode == WRITE_MODE:
        if _is_star(if_none_match) and exists:
            return PRECONDITION_FAILED
    elif exists and etag_matches(if_none_match, etag):
        return NOT_MODIFIED
    return PROCEED


def evaluate_read(if_none_match, etag):
    return evaluate(if_none_match=if_none_match, etag=etag, exists=True, mode=READ_MODE)


def evaluate_write(if_match, if_none_match, etag, exists, must_exist=False):
    return evaluate(if_match=if_match, if_none_match=if_none_match, etag=etag,
                    exists=exists, must_exist=must_exist, mode=WRITE_MODE)
