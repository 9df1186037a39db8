# Copyright: 2011 MoinMoin:RonnyPfannschmidt
# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - backend base classes

A backend stores documents and synthetic directory markers of many users.
Metadata is exchanged as dicts keyed by the constants in config (NAME, ETAG,
CONTENTTYPE, SIZE, TIMESTAMP). Paths are given as (user, directory, key),
directory without leading or trailing slash, root directory is u''.
"""


from abc import abstractmethod, ABCMeta


class BackendBase(metaclass=ABCMeta):
    """
    read access to documents, directory markers and authorizations
    """
    @abstractmethod
    def open(self):
        """
        open the backend, allocate resources
        """

    @abstractmethod
    def close(self):
        """
        close the backend, free resources (except the stored meta/data!)
        """

    @abstractmethod
    def get_authorizations(self, user, token):
        """
        return list of authorizations ("scope:permission" or "scope") granted
        to token, empty list if there are none
        """

    @abstractmethod
    def get_document(self, user, directory, key):
        """
        return meta, data (bytes) of a document, raise NotFound if it does not exist
        """

    def head_document(self, user, directory, key):
        """
        return meta of a document, raise NotFound if it does not exist
        """
        meta, data = self.get_document(user, directory, key)
        return meta

    @abstractmethod
    def get_directory_marker(self, user, directory):
        """
        return meta (ETAG, TIMESTAMP) of a directory marker, raise NotFound if
        there is none
        """

    @abstractmethod
    def list_children(self, user, directory):
        """
        return list of metas of the documents and subdirectories directly
        inside directory. subdirectory names end with a slash.
        """

    def has_children(self, user, directory):
        """
        does directory contain at least one document or non-empty subdirectory?
        """
        return bool(self.list_children(user, directory))


class MutableBackendBase(BackendBase):
    """
    same as Backend, but read/write
    """
    @abstractmethod
    def create(self):
        """
        create the backend
        """

    @abstractmethod
    def destroy(self):
        """
        destroy the backend, erase all meta/data it contains
        """

    @abstractmethod
    def put_document(self, user, directory, key, data, content_type, timestamp, binary=False):
        """
        store (create or overwrite) a document, return its new meta

        :param data: payload (bytes)
        :param timestamp: modification time, ms since epoch
        :param binary: payload shall go to the blob store (if there is one)
        """

    @abstractmethod
    def delete_document(self, user, directory, key):
        """
        delete a document, raise NotFound if it does not exist
        """

    @abstractmethod
    def put_directory_marker(self, user, directory, timestamp, body):
        """
        create or update the marker of directory and link it to its parent,
        return its new meta. the marker etag is the hash of body.
        """

    @abstractmethod
    def delete_directory_marker(self, user, directory):
        """
        delete the marker of directory and unlink it from its parent
        """

    def has_name_collision(self, user, directory, key):
        """
        would a document at directory/key collide with an existing
        directory or an existing document at one of the ancestor paths?
        """
        return False
