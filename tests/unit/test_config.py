"""配置单元测试。"""

import os

import pytest

from pydantic import ValidationError

from filesync.core.config import DEFAULT_MAX_HASH_SIZE, Settings, get_settings, load_endpoints_file


def _clean_env(monkeypatch):
    # 清理可能覆盖默认值的环境变量
    for key in list(os.environ):
        if key.startswith("APP_"):
            monkeypatch.delenv(key, raising=False)


class TestSettingsDefaults:
    def test_defaults(self, monkeypatch):
        _clean_env(monkeypatch)
        s = Settings(_env_file=None)
        assert s.env == "development"
        assert s.port == 8080
        assert s.log_level == "INFO"
        assert s.endpoints == {}
        assert s.max_hash_size == DEFAULT_MAX_HASH_SIZE == 50 * 1024 * 1024
        assert s.max_tree_depth == 0
        assert s.resolve_symlinks is True
        assert s.rate_limit == ""


class TestEndpoints:
    def test_from_env_json(self, monkeypatch, tmp_path):
        _clean_env(monkeypatch)
        monkeypatch.setenv("APP_ENDPOINTS", f'{{"docs": "{tmp_path}"}}')
        s = Settings(_env_file=None)
        assert s.endpoints == {"docs": str(tmp_path)}

    def test_relative_root_made_absolute(self):
        s = Settings(endpoints={"rel": "some/dir"}, _env_file=None)
        assert os.path.isabs(s.endpoints["rel"])
        assert s.endpoints["rel"].endswith(os.path.join("some", "dir"))

    def test_name_trimmed(self, tmp_path):
        s = Settings(endpoints={" docs ": str(tmp_path)}, _env_file=None)
        assert list(s.endpoints) == ["docs"]

    @pytest.mark.parametrize("name", ["", "  ", "a/b"])
    def test_invalid_name(self, name, tmp_path):
        with pytest.raises(ValidationError):
            Settings(endpoints={name: str(tmp_path)}, _env_file=None)

    def test_empty_root(self):
        with pytest.raises(ValidationError):
            Settings(endpoints={"docs": " "}, _env_file=None)

    def test_yaml_file_plain_mapping(self, tmp_path):
        f = tmp_path / "endpoints.yaml"
        f.write_text(f"docs: {tmp_path}/docs\nmusic: {tmp_path}/music\n", encoding="utf-8")
        s = Settings(endpoints_file=str(f), _env_file=None)
        assert s.endpoints == {"docs": f"{tmp_path}/docs", "music": f"{tmp_path}/music"}

    def test_yaml_file_nested_key(self, tmp_path):
        f = tmp_path / "endpoints.yaml"
        f.write_text(f"endpoints:\n  docs: {tmp_path}/docs\n", encoding="utf-8")
        assert load_endpoints_file(str(f)) == {"docs": f"{tmp_path}/docs"}

    def test_env_entries_win_over_file(self, tmp_path):
        f = tmp_path / "endpoints.yaml"
        f.write_text(f"docs: {tmp_path}/from-file\nmusic: {tmp_path}/music\n", encoding="utf-8")
        s = Settings(endpoints={"docs": f"{tmp_path}/from-env"}, endpoints_file=str(f), _env_file=None)
        assert s.endpoints["docs"] == f"{tmp_path}/from-env"
        assert s.endpoints["music"] == f"{tmp_path}/music"

    def test_yaml_file_not_a_mapping(self, tmp_path):
        f = tmp_path / "endpoints.yaml"
        f.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_endpoints_file(str(f))


class TestApiTokens:
    def test_empty(self):
        s = Settings(api_tokens="", _env_file=None)
        assert s.get_valid_api_tokens() == frozenset()

    def test_multiple(self):
        s = Settings(api_tokens=" tok1 , tok2 ", _env_file=None)
        assert s.get_valid_api_tokens() == {"tok1", "tok2"}

    def test_whitespace_only(self):
        s = Settings(api_tokens="   ", _env_file=None)
        assert s.get_valid_api_tokens() == frozenset()


class TestValidators:
    def test_log_level_valid(self):
        for level in ("DEBUG", "INFO", "WARNING", "ERROR", "debug", "info"):
            s = Settings(log_level=level, _env_file=None)
            assert s.log_level == level.upper()

    def test_log_level_invalid(self):
        with pytest.raises(ValidationError):
            Settings(log_level="TRACE", _env_file=None)

    def test_negative_max_hash_size(self):
        with pytest.raises(ValidationError):
            Settings(max_hash_size=-1, _env_file=None)

    def test_negative_tree_depth(self):
        with pytest.raises(ValidationError):
            Settings(max_tree_depth=-1, _env_file=None)

    def test_chunk_size_positive(self):
        with pytest.raises(ValidationError):
            Settings(download_chunk_size=0, _env_file=None)


class TestIsProduction:
    def test_production(self):
        assert Settings(env="production", _env_file=None).is_production is True

    def test_staging(self):
        assert Settings(env="staging", _env_file=None).is_production is False


class TestGetSettings:
    def test_cached(self):
        a = get_settings()
        b = get_settings()
        assert a is b
