import importlib.util
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "validate_env.py"


@pytest.fixture
def validate_env(monkeypatch):
    for name in (
        "CACHE_DEFAULT_TTL_SECONDS",
        "CACHE_SWEEP_INTERVAL_SECONDS",
        "CACHE_SWEEP_ENABLED",
        "CACHE_FETCH_TIMEOUT_SECONDS",
        "CACHE_RETRY_MAX_ATTEMPTS",
        "CACHE_RETRY_BASE_DELAY_SECONDS",
        "CACHE_RETRY_MAX_DELAY_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    spec = importlib.util.spec_from_file_location("validate_env", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    monkeypatch.setattr(module, "load_dotenv", lambda *args, **kwargs: None)
    return module


def test_defaults_are_valid(validate_env, capsys):
    assert validate_env.main() == 0
    assert "OK: environment looks valid" in capsys.readouterr().out


def test_fractional_retry_attempts_rejected(validate_env, monkeypatch, capsys):
    monkeypatch.setenv("CACHE_RETRY_MAX_ATTEMPTS", "2.5")
    assert validate_env.main() == 1
    assert "CACHE_RETRY_MAX_ATTEMPTS must be an integer" in capsys.readouterr().out


def test_zero_ttl_rejected(validate_env, monkeypatch, capsys):
    monkeypatch.setenv("CACHE_DEFAULT_TTL_SECONDS", "0")
    assert validate_env.main() == 1
    assert "CACHE_DEFAULT_TTL_SECONDS must be positive" in capsys.readouterr().out
