from datetime import datetime, timedelta

import pytest

from pixkeep.core.clipboard import MemoryClipboard
from pixkeep.core.preferences import SharedPreferences
from pixkeep.core.storage import DatabaseManager, ImageStore
from pixkeep.services import StoreClient

T0 = datetime(2026, 3, 1, 12, 0, 0)

PNG_A = b'\x89PNG\r\n\x1a\n' + b'image-a' * 16
PNG_B = b'\x89PNG\r\n\x1a\n' + b'image-b' * 16


class FakeClock:
    def __init__(self, now=T0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def database(tmp_path):
    manager = DatabaseManager(str(tmp_path / 'ClipStorage.sqlite'))
    yield manager
    manager.close()


@pytest.fixture
def store(database):
    return ImageStore(database)


@pytest.fixture
def preferences(tmp_path):
    prefs = SharedPreferences.open(str(tmp_path / 'preferences.sqlite'))
    yield prefs
    prefs.close()


@pytest.fixture
def clipboard():
    return MemoryClipboard()


@pytest.fixture
def make_client(store, preferences, clock):
    """Build a client over the shared files; each call stands for one process"""
    def factory(clipboard=None, **kwargs):
        return StoreClient(store, preferences, clipboard or MemoryClipboard(), clock=clock, **kwargs)
    return factory
