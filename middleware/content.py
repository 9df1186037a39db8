# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - content classification

Decides whether a payload is stored inline (text) or as an opaque blob.
"""


import json

from werkzeug.http import parse_options_header

from config import DEFAULT_CONTENTTYPE, STRUCTURED_CONTENTTYPES
from errors import UnprocessablePayload

INLINE = 'inline'
BINARY = 'binary'


def mimetype_of(content_type):
    return parse_options_header(content_type or DEFAULT_CONTENTTYPE)[0].lower()


def is_structured(content_type):
    return mimetype_of(content_type) in STRUCTURED_CONTENTTYPES


def _declares_binary(content_type):
    options = parse_options_header(content_type or DEFAULT_CONTENTTYPE)[1]
    return options.get('charset', '').lower() == 'binary'


def _is_text(data):
    try:
        data.decode('utf-8')
    except UnicodeDecodeError:
        return False
    return True


def validate_structured(data):
    """
    raise UnprocessablePayload unless data is a valid JSON document
    """
    try:
        json.loads(data.decode('utf-8'))
    except ValueError as err:
        # UnicodeDecodeError is a ValueError, too
        raise UnprocessablePayload("invalid JSON payload: %s" % err)


def classify(content_type, data):
    """
    :returns: BINARY if content_type declares charset=binary or data is no
              valid UTF-8, INLINE otherwise. structured payloads must be
              valid, else UnprocessablePayload is raised.
    """
    if _declares_binary(content_type):
        return BINARY
    if is_structured(content_type):
        validate_structured(data)
        return INLINE
    if not _is_text(data):
        return BINARY
    return INLINE


def prepare_payload(content_type, data):
    """
    :returns: kind (INLINE or BINARY), data to store
    """
    if is_structured(content_type) and not _declares_binary(content_type) and not data.strip():
        # an empty structured document is an empty object
        data = b'{}'
    return classify(content_type, data), data
