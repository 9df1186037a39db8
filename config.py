# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - configuration constants
"""

# permissions a token may have on a scope
READ = 'r'
READWRITE = 'rw'
PERMISSIONS = [READ, READWRITE, ]

# first path segment of world-readable documents
PUBLIC = 'public'

# metadata keys
NAME = "name"
ETAG = "etag"
CONTENTTYPE = "content_type"
SIZE = "size"
# milliseconds since epoch
TIMESTAMP = "timestamp"
# key of the blob holding the payload, if it is not stored inline
BINARY_KEY = "binary_key"

# record keys used by the key/value binding
META = "meta"
VALUE = "value"

# secondary index names
USER_INDEX = "user_id_bin"
DIRECTORY_INDEX = "directory_bin"
# index value used for the root directory
ROOT_INDEX = "/"

DEFAULT_CONTENTTYPE = "text/plain; charset=utf-8"
JSON_CONTENTTYPE = "application/json"
STRUCTURED_CONTENTTYPES = [JSON_CONTENTTYPE, ]

# @context of a folder description (listing body)
FOLDER_DESCRIPTION = "http://remotestorage.io/spec/folder-description"

# we need a specific hash algorithm to compute etags of documents and
# directory markers. it must match what the object store uses.
HASH_ALGORITHM = 'md5'

# seconds a file-backed credential is trusted before it gets re-read
TOKEN_MAX_AGE = 3600

# seconds a single request may spend talking to backends
REQUEST_TIMEOUT = 30.0
