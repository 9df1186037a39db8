# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - operations log tests
"""


import pytest

from stores.memory import BytesStore

from ..opslog import OperationLog, extract_category


@pytest.mark.parametrize('directory,category', [
    ('contacts', 'contacts'),
    ('contacts/work/2012', 'contacts'),
    ('public/photos', 'public/photos'),
    ('public/photos/2012', 'public/photos'),
    ('public', 'public'),
    ('', ''),
])
def test_extract_category(directory, category):
    assert extract_category(directory) == category


def make_log():
    store = BytesStore()
    store.create()
    store.open()
    return OperationLog(store)


def test_no_change_is_not_logged():
    log = make_log()
    log.log('joe', 'docs', 0, 10, 10)
    assert list(log) == []


def test_usage():
    log = make_log()
    log.log('joe', 'docs', 1, 10)
    log.log('joe', 'docs/work', 1, 5)
    log.log('joe', 'docs', 0, 20, 10)
    log.log('joe', 'public/photos/2012', 1, 100)
    log.log('ann', 'docs', 1, 1)
    log.log('joe', 'docs/work', -1, 0, 5)
    assert log.usage('joe') == {
        'docs': {"count": 1, "size": 20},
        'public/photos': {"count": 1, "size": 100},
    }
    assert log.usage('ann') == {'docs': {"count": 1, "size": 1}}
    assert log.usage('bob') == {}
