# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - store wrappers
"""


import json

from errors import CorruptState


class IndexedStore(object):
    """
    Adds JSON records with secondary indexes to a pair of bytes stores,
    similar to a key/value bucket with index support.

    record_store: key -> JSON {"indexes": {name: [values]}, "record": {...}}
    index_store: "name:value" -> JSON list of keys

    Note: record and index updates are separate writes, there is no
    atomicity across them. Index entries pointing to vanished records are
    skipped by map().
    """
    def __init__(self, record_store, index_store):
        self.record_store = record_store
        self.index_store = index_store

    def create(self):
        self.record_store.create()
        self.index_store.create()

    def destroy(self):
        self.record_store.destroy()
        self.index_store.destroy()

    def open(self):
        self.record_store.open()
        self.index_store.open()

    def close(self):
        self.record_store.close()
        self.index_store.close()

    def __iter__(self):
        return iter(self.record_store)

    def __len__(self):
        return len(self.record_store)

    def __contains__(self, key):
        return key in self.record_store

    def _serialize(self, obj):
        text = json.dumps(obj, ensure_ascii=False)
        return text.encode('utf-8')

    def _deserialize(self, key, data):
        try:
            return json.loads(data.decode('utf-8'))
        except ValueError as err:
            raise CorruptState("%s [while decoding record '%s']" % (err, key))

    def _load(self, key):
        entry = self._deserialize(key, self.record_store[key])
        if not isinstance(entry, dict) or 'record' not in entry:
            raise CorruptState("record '%s' has no payload" % key)
        return entry

    def _index_key(self, name, value):
        return '%s:%s' % (name, value)

    def _index_keys(self, indexes):
        for name, values in indexes.items():
            for value in values:
                yield self._index_key(name, value)

    def _get_index_entry(self, index_key):
        try:
            keys = self._deserialize(index_key, self.index_store[index_key])
        except KeyError:
            return set()
        return set(keys)

    def _set_index_entry(self, index_key, keys):
        if keys:
            self.index_store[index_key] = self._serialize(sorted(keys))
        else:
            try:
                del self.index_store[index_key]
            except KeyError:
                pass

    def _unindex(self, key, indexes):
        for index_key in self._index_keys(indexes):
            keys = self._get_index_entry(index_key)
            keys.discard(key)
            self._set_index_entry(index_key, keys)

    def _index(self, key, indexes):
        for index_key in self._index_keys(indexes):
            keys = self._get_index_entry(index_key)
            if key not in keys:
                keys.add(key)
                self._set_index_entry(index_key, keys)

    def _old_indexes(self, key):
        try:
            return self._load(key).get('indexes', {})
        except (KeyError, CorruptState):
            return {}

    def store(self, key, record, indexes=None):
        """
        store record (a JSON-serializable dict) under key, (re-)index it

        :param indexes: dict index name -> list of values
        """
        indexes = indexes or {}
        old_indexes = self._old_indexes(key)
        self.record_store[key] = self._serialize(dict(indexes=indexes, record=record))
        stale = dict((name, [v for v in values if v not in indexes.get(name, [])])
                     for name, values in old_indexes.items())
        self._unindex(key, stale)
        self._index(key, indexes)

    def retrieve(self, key):
        """
        return the record stored under key, raise KeyError if there is none
        """
        return self._load(key)['record']

    def remove(self, key):
        """
        remove the record stored under key and its index entries
        """
        indexes = self._old_indexes(key)
        del self.record_store[key]
        self._unindex(key, indexes)

    def get_index(self, name, value):
        """
        return set of keys indexed with value under index name
        """
        return self._get_index_entry(self._index_key(name, value))

    def map(self, keys, transform):
        """
        batched transform query: call transform(key, record) for every key
        and concatenate the lists it returns (sorted by key).
        """
        result = []
        for key in sorted(keys):
            try:
                record = self.retrieve(key)
            except KeyError:
                # removed since the index query
                continue
            result.extend(transform(key, record))
        return result
