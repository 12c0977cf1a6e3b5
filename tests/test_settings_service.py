import pytest

from pixkeep.services import SettingsService
from pixkeep.services.settings_service import validate_retention_days


def test_load_initializes_shared_value(preferences):
    settings = SettingsService(preferences)

    assert settings.load_retention_days() == 30
    assert preferences.get('expiration_length') == 30


def test_load_repairs_non_positive_value(preferences):
    preferences.set_retention_days(-3)

    assert SettingsService(preferences).load_retention_days() == 30
    assert preferences.get_retention_days() == 30


def test_update_within_range(preferences):
    settings = SettingsService(preferences)

    assert settings.update_retention_days(1) == 1
    assert settings.update_retention_days(365) == 365
    assert preferences.get_retention_days() == 365


@pytest.mark.parametrize("days", [0, 366, -1, 2.5, True, "7"])
def test_update_rejects_invalid_values(preferences, days):
    preferences.set_retention_days(10)

    with pytest.raises(ValueError):
        SettingsService(preferences).update_retention_days(days)

    assert preferences.get_retention_days() == 10


def test_validate_returns_value():
    assert validate_retention_days(45) == 45
