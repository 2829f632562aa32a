import os

import pytest

from revdiff.config import ENV_PREFIX, config_from_mapping, load_config
from revdiff.presets import EngineConfig, get_preset


def _drop_revdiff_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    _drop_revdiff_env(monkeypatch)
    yield
    # load_dotenv writes straight into os.environ
    for key in [k for k in os.environ if k.startswith(ENV_PREFIX)]:
        del os.environ[key]


def test_mapping_overrides_are_parsed():
    config = config_from_mapping(
        EngineConfig(),
        {"REVDIFF_QUANTIZATION_STEP": "5", "REVDIFF_MAX_POLL_ATTEMPTS": "40", "REVDIFF_SCALE": " "},
    )
    assert config.quantization_step == 5.0
    assert config.max_poll_attempts == 40
    assert config.scale == 1.0


def test_invalid_value_names_the_variable():
    with pytest.raises(ValueError) as excinfo:
        config_from_mapping(EngineConfig(), {"REVDIFF_PAGE": "first"})
    assert "REVDIFF_PAGE" in str(excinfo.value)


def test_load_config_defaults_to_balanced(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config(env_file=str(tmp_path / "missing.env")) == get_preset("balanced").config


def test_load_config_reads_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("REVDIFF_PRESET=fast\nREVDIFF_FALLBACK_WIDTH=64\n", encoding="utf-8")

    config = load_config(env_file=str(env_file))

    assert config.max_poll_attempts == get_preset("fast").config.max_poll_attempts
    assert config.fallback_width == 64.0


def test_process_environment_wins_over_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("REVDIFF_MIN_HIGHLIGHT_CHARS=3\n", encoding="utf-8")
    monkeypatch.setenv("REVDIFF_MIN_HIGHLIGHT_CHARS", "2")

    assert load_config("patient", env_file=str(env_file)).min_highlight_chars == 2
