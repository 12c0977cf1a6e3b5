import sys
from datetime import datetime, timedelta

import pytest
import yaml
from loguru import logger

from pixkeep.app import PixKeepApp, main
from pixkeep.core.clipboard import MemoryClipboard
from pixkeep.core.errors import StoreInitializationError
from pixkeep.core.storage import DatabaseManager, ImageStore

from .conftest import PNG_A


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / 'settings.yaml'
    path.write_text(yaml.dump({'storage': {'shared_dir': str(tmp_path / 'group')}}))
    return str(path)


def test_initialize_creates_shared_files(config_path, tmp_path):
    app = PixKeepApp('host', config_path, clipboard=MemoryClipboard(), setup_logging=False)
    try:
        assert app.initialize()
        assert (tmp_path / 'group' / 'ClipStorage.sqlite').exists()
        assert (tmp_path / 'group' / 'preferences.sqlite').exists()
        assert app.client.items == []
    finally:
        app.shutdown()


def test_keyboard_change_reaches_host(config_path):
    keyboard = PixKeepApp('keyboard', config_path, clipboard=MemoryClipboard(PNG_A), setup_logging=False)
    host = PixKeepApp('host', config_path, clipboard=MemoryClipboard(), setup_logging=False)
    try:
        assert keyboard.initialize()
        assert host.initialize()

        record = keyboard.client.add_from_external_source()

        items = host.activate()
        assert [r.id for r, _ in items] == [record.id]
        assert host.activate() is None
    finally:
        keyboard.shutdown()
        host.shutdown()


def test_settings_change_applies_to_other_surface(config_path):
    keyboard = PixKeepApp('keyboard', config_path, clipboard=MemoryClipboard(PNG_A), setup_logging=False)
    host = PixKeepApp('host', config_path, clipboard=MemoryClipboard(), setup_logging=False)
    try:
        assert keyboard.initialize()
        assert host.initialize()

        host.settings.update_retention_days(3)
        before = datetime.now()
        record = keyboard.client.add_from_external_source()

        assert timedelta(days=3) <= record.expires_at - before < timedelta(days=3, minutes=1)
    finally:
        keyboard.shutdown()
        host.shutdown()


def test_unopenable_store_is_fatal(tmp_path):
    blocker = tmp_path / 'group'
    blocker.write_text('not a directory')
    path = tmp_path / 'settings.yaml'
    path.write_text(yaml.dump({'storage': {'shared_dir': str(blocker)}}))

    app = PixKeepApp('host', str(path), clipboard=MemoryClipboard(), setup_logging=False)

    with pytest.raises(StoreInitializationError):
        app.initialize()


def test_invalid_config_fails_initialize(tmp_path):
    path = tmp_path / 'settings.yaml'
    path.write_text(yaml.dump({'storage': {'shared_dir': str(tmp_path), 'busy_timeout': -1}}))

    app = PixKeepApp('host', str(path), clipboard=MemoryClipboard(), setup_logging=False)

    assert app.initialize() is False


def test_unknown_surface():
    with pytest.raises(ValueError):
        PixKeepApp('watch', setup_logging=False)


def test_activate_before_initialize(config_path):
    app = PixKeepApp('host', config_path, setup_logging=False)

    with pytest.raises(RuntimeError):
        app.activate()


def _seed_expired_image(group_dir):
    group_dir.mkdir(parents=True, exist_ok=True)
    manager = DatabaseManager(str(group_dir / 'ClipStorage.sqlite'))
    try:
        ImageStore(manager).create(PNG_A, 1, datetime.now() - timedelta(days=5))
    finally:
        manager.close()


def _record_vacuum(monkeypatch):
    calls = []
    original = DatabaseManager.vacuum

    def vacuum(self):
        calls.append(self.db_path)
        original(self)

    monkeypatch.setattr(DatabaseManager, 'vacuum', vacuum)
    return calls


def test_vacuum_after_purge(tmp_path, monkeypatch):
    group = tmp_path / 'group'
    _seed_expired_image(group)
    path = tmp_path / 'settings.yaml'
    path.write_text(yaml.dump({'storage': {'shared_dir': str(group)},
                               'cleanup': {'vacuum_after_purge': True}}))
    calls = _record_vacuum(monkeypatch)

    app = PixKeepApp('host', str(path), clipboard=MemoryClipboard(), setup_logging=False)
    try:
        assert app.initialize()
        assert app.client.purged_on_start == 1
        assert app.store.count() == 0
        assert calls == [str(group / 'ClipStorage.sqlite')]
    finally:
        app.shutdown()


def test_no_vacuum_when_disabled(config_path, tmp_path, monkeypatch):
    _seed_expired_image(tmp_path / 'group')
    calls = _record_vacuum(monkeypatch)

    app = PixKeepApp('host', config_path, clipboard=MemoryClipboard(), setup_logging=False)
    try:
        assert app.initialize()
        assert app.client.purged_on_start == 1
        assert calls == []
    finally:
        app.shutdown()


@pytest.fixture
def restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_main_starts_surface_from_argv(tmp_path, monkeypatch, restore_logging):
    monkeypatch.setenv('PIXKEEP_SHARED_DIR', str(tmp_path))
    monkeypatch.setattr(sys, 'argv', ['main.py', 'keyboard'])

    app = main()
    try:
        assert app.surface == 'keyboard'
        assert app.client is not None
        assert (tmp_path / 'ClipStorage.sqlite').exists()
    finally:
        app.shutdown()


def test_main_defaults_to_host(tmp_path, monkeypatch, restore_logging):
    monkeypatch.setenv('PIXKEEP_SHARED_DIR', str(tmp_path))
    monkeypatch.setattr(sys, 'argv', ['main.py'])

    app = main()
    try:
        assert app.surface == 'host'
    finally:
        app.shutdown()


def test_main_rejects_unknown_surface(monkeypatch):
    monkeypatch.setattr(sys, 'argv', ['main.py', 'watch'])

    with pytest.raises(SystemExit) as exc:
        main()

    assert exc.value.code == 2
