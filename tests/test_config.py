"""Settings loading."""

import pytest

from taskboard.core.config import Settings


@pytest.mark.unit
def test_settings_read_env_and_dotenv_file(monkeypatch):
    monkeypatch.setenv("DRAG_ACTIVATION_DISTANCE", "12.5")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    loaded = Settings(_env_file=None)

    assert loaded.DRAG_ACTIVATION_DISTANCE == 12.5
    assert loaded.LOG_LEVEL == "DEBUG"
    assert loaded.ALGORITHM == "HS256"
    assert Settings.model_config["env_file"] == ".env"
    assert "Config" not in vars(Settings)
