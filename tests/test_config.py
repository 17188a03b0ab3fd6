import pytest
from pydantic import ValidationError

from core.config import AppSettings, _parse_env_lines, write_user_env_vars


def test_default_base_url():
    assert AppSettings().base_url == "http://127.0.0.1:8888/v1"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("LEASECTL_SERVER_ADDR", "10.0.0.1:9000/")
    monkeypatch.setenv("LEASECTL_API_VERSION", "/v2/")
    settings = AppSettings()
    assert settings.base_url == "http://10.0.0.1:9000/v2"


def test_project_env_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("LEASECTL_SCHEME=https\n", encoding="utf-8")
    assert AppSettings().scheme == "https"


def test_scheme_is_validated():
    with pytest.raises(ValidationError):
        AppSettings(scheme="ftp")


def test_read_timeout_defaults_to_none_for_long_polls():
    assert AppSettings().read_timeout_seconds is None


def test_write_user_env_vars_merges(tmp_path):
    env_path = tmp_path / "cfg" / ".env"
    write_user_env_vars({"LEASECTL_SERVER_ADDR": "a:1", "LEASECTL_SCHEME": "http"}, env_path)
    write_user_env_vars({"LEASECTL_SCHEME": "https", "LEASECTL_API_VERSION": None}, env_path)

    values = _parse_env_lines(env_path.read_text(encoding="utf-8"))
    assert values == {"LEASECTL_SERVER_ADDR": "a:1", "LEASECTL_SCHEME": "https"}


def test_parse_env_lines_skips_comments_and_quotes():
    text = '# comment\n\nA="1"\nB = \'two\'\ninvalid\n'
    assert _parse_env_lines(text) == {"A": "1", "B": "two"}
