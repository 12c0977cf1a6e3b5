import yaml

from pixkeep.utils import ConfigManager


def test_defaults_without_file(tmp_path):
    config = ConfigManager(str(tmp_path / 'settings.yaml'))

    assert config.get('storage.database_file') == 'ClipStorage.sqlite'
    assert config.get('logging.level') == 'INFO'
    assert config.validate()


def test_user_file_is_merged(tmp_path):
    path = tmp_path / 'settings.yaml'
    path.write_text(yaml.dump({'storage': {'shared_dir': str(tmp_path / 'group')},
                               'logging': {'level': 'DEBUG'}}))

    config = ConfigManager(str(path))

    assert config.shared_dir == tmp_path / 'group'
    assert config.database_path == tmp_path / 'group' / 'ClipStorage.sqlite'
    assert config.preferences_path == tmp_path / 'group' / 'preferences.sqlite'
    assert config.get('storage.busy_timeout') == 5.0
    assert config.get('logging.level') == 'DEBUG'


def test_env_shared_dir(tmp_path, monkeypatch):
    monkeypatch.setenv('PIXKEEP_SHARED_DIR', str(tmp_path / 'env'))

    config = ConfigManager(str(tmp_path / 'settings.yaml'))

    assert config.shared_dir == tmp_path / 'env'


def test_set_and_save(tmp_path):
    path = tmp_path / 'settings.yaml'
    config = ConfigManager(str(path))

    config.set('cleanup.vacuum_after_purge', True)
    assert config.save()

    assert ConfigManager(str(path)).get('cleanup.vacuum_after_purge') is True


def test_reset_restores_defaults(tmp_path):
    config = ConfigManager(str(tmp_path / 'settings.yaml'))
    config.set('logging.level', 'ERROR')

    config.reset()

    assert config.get('logging.level') == 'INFO'
    assert ConfigManager.DEFAULTS['logging']['level'] == 'INFO'


def test_validate_rejects_bad_values(tmp_path):
    config = ConfigManager(str(tmp_path / 'settings.yaml'))

    config.set('storage.preferences_file', config.get('storage.database_file'))
    assert not config.validate()

    config.reset()
    config.set('storage.busy_timeout', 0)
    assert not config.validate()

    config.reset()
    config.set('logging.level', 'LOUD')
    assert not config.validate()
