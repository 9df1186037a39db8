# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - sqlite3 store
"""


import zlib
from io import BytesIO
from sqlite3 import connect, Row, Error as SqliteError

from . import MutableStoreBase, BytesMutableStoreBase, FileMutableStoreBase


class _Store(MutableStoreBase):
    """
    A simple sqlite3 based store.
    """
    def __init__(self, db_name, table_name='store', compression_level=0):
        """
        :param db_name: database file name (or ':memory:')
        :param table_name: table to use, several stores may share one db
        :param compression_level: zlib compression level, 0 means no compression
        """
        self.db_name = db_name
        self.table_name = table_name
        self.compression_level = compression_level
        self.conn = None

    def _connect(self):
        if self.conn is None:
            self.conn = connect(self.db_name, check_same_thread=False)
            self.conn.row_factory = Row # make column access by ['colname'] possible
        return self.conn

    def _execute(self, sql, params=()):
        """
        run a modifying statement in a transaction, sqlite errors become IOError
        """
        conn = self._connect()
        try:
            with conn:
                return conn.execute(sql, params)
        except SqliteError as err:
            raise IOError("%s [while executing '%s']" % (err, sql))

    def _fetch(self, sql, params=()):
        try:
            return self._connect().execute(sql, params).fetchall()
        except SqliteError as err:
            raise IOError("%s [while executing '%s']" % (err, sql))

    def create(self):
        self._execute('create table %s (key text primary key, value blob)' % self.table_name)

    def destroy(self):
        self._execute('drop table if exists %s' % self.table_name)

    def open(self):
        self._connect()

    def close(self):
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def _compress(self, value):
        if self.compression_level:
            value = zlib.compress(value, self.compression_level)
        return value

    def _decompress(self, value):
        if self.compression_level:
            value = zlib.decompress(value)
        return value

    def _get(self, key):
        rows = self._fetch("select value from %s where key=?" % self.table_name, (key, ))
        if not rows:
            raise KeyError(key)
        return self._decompress(bytes(rows[0]['value']))

    def _set(self, key, value):
        self._execute('insert or replace into %s values (?, ?)' % self.table_name,
                      (key, self._compress(value)))

    def __iter__(self):
        for row in self._fetch("select key from %s" % self.table_name):
            yield row['key']

    def __len__(self):
        rows = self._fetch("select count(*) as n from %s" % self.table_name)
        return rows[0]['n']

    def __delitem__(self, key):
        cursor = self._execute('delete from %s where key=?' % self.table_name, (key, ))
        if not cursor.rowcount:
            raise KeyError(key)


class BytesStore(_Store, BytesMutableStoreBase):
    def __getitem__(self, key):
        return self._get(key)

    def __setitem__(self, key, value):
        self._set(key, value)


class FileStore(_Store, FileMutableStoreBase):
    def __getitem__(self, key):
        return BytesIO(self._get(key))

    def __setitem__(self, key, stream):
        self._set(key, stream.read())
