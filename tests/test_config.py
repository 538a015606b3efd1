"""Tests for the configuration module."""

import pytest

from mlog.config import (
    DEFAULT_MAX_FILES,
    LogConfig,
    LogMode,
    RotationConfig,
    load_config,
    load_yaml,
    parse_duration,
    parse_size,
)
from mlog.errors import ConfigError


class TestParseSize:
    def test_units(self):
        assert parse_size("10K") == 10 * 1024
        assert parse_size("25M") == 25 * 1024 * 1024
        assert parse_size("1G") == 1024 ** 3
        assert parse_size("2k") == 2048

    def test_plain_bytes(self):
        assert parse_size(512) == 512
        assert parse_size("512") == 512

    @pytest.mark.parametrize("bad", ["", "M", "tenK", "1.5M", "-1K", True])
    def test_rejects_garbage(self, bad):
        with pytest.raises(ConfigError):
            parse_size(bad)


class TestParseDuration:
    def test_hours_and_days(self):
        assert parse_duration("1h") == 3600
        assert parse_duration("1.5h") == 5400
        assert parse_duration("2d") == 2 * 86400

    def test_seconds_and_minutes(self):
        assert parse_duration("30s") == 30
        assert parse_duration("5m") == 300
        assert parse_duration(90) == 90
        assert parse_duration("90") == 90

    @pytest.mark.parametrize("bad", [
        "", "h", "soon", "-1h", "1w", "infh", "nanh", float("inf"), float("nan"),
    ])
    def test_rejects_garbage(self, bad):
        with pytest.raises(ConfigError):
            parse_duration(bad)


class TestRotationConfig:
    def test_defaults(self):
        cfg = RotationConfig(path="/tmp/x.log")
        assert cfg.mode is LogMode.REDIRECT
        assert cfg.max_files == DEFAULT_MAX_FILES
        assert cfg.max_age == 0
        assert cfg.max_size == 0

    def test_frozen(self):
        cfg = RotationConfig(path="/tmp/x.log")
        with pytest.raises(AttributeError):
            cfg.max_files = 3

    @pytest.mark.parametrize("num", [0, -1])
    def test_rejects_max_files_below_one(self, num):
        with pytest.raises(ConfigError):
            RotationConfig(path="/tmp/x.log", max_files=num)

    def test_rejects_empty_path(self):
        with pytest.raises(ConfigError):
            RotationConfig(path="")

    def test_from_dict_full(self):
        cfg = RotationConfig.from_dict({
            "target": "file",
            "mode": "tee",
            "file": {"name": "/var/log/out.log", "num": 3, "time": "1h", "size": "10K"},
        })
        assert cfg == RotationConfig(
            path="/var/log/out.log", mode=LogMode.TEE, max_files=3, max_age=3600, max_size=10240,
        )

    def test_from_dict_minimal(self):
        cfg = RotationConfig.from_dict({"target": "file", "file": {"name": "out.log"}})
        assert cfg.mode is LogMode.REDIRECT
        assert cfg.max_files == 5

    def test_from_dict_expands_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        cfg = RotationConfig.from_dict({"target": "file", "file": {"name": "~/out.log"}})
        assert cfg.path == str(tmp_path / "out.log")

    @pytest.mark.parametrize("section", [
        {"file": {"name": "out.log"}},
        {"target": "syslog", "file": {"name": "out.log"}},
        {"target": "file"},
        {"target": "file", "file": {}},
        {"target": "file", "mode": "append", "file": {"name": "out.log"}},
        {"target": "file", "file": {"name": "out.log", "num": 0}},
        {"target": "file", "file": {"name": "out.log", "num": "five"}},
        "not a mapping",
    ])
    def test_from_dict_rejects(self, section):
        with pytest.raises(ConfigError):
            RotationConfig.from_dict(section)


class TestLogConfig:
    def test_sections_are_optional(self):
        cfg = LogConfig.from_dict({"stdout": {"target": "file", "file": {"name": "o.log"}}})
        assert cfg.stdout.path == "o.log"
        assert cfg.stderr is None
        assert cfg.mlog is None

    def test_empty(self):
        assert LogConfig.from_dict(None) == LogConfig()


class TestLoadConfig:
    def _write(self, tmp_path, text):
        path = tmp_path / "mlog.yml"
        path.write_text(text)
        return str(path)

    def test_explicit_path(self, tmp_path):
        path = self._write(tmp_path, (
            "stdout:\n"
            "  target: file\n"
            "  mode: tee\n"
            "  file:\n"
            "    name: out.log\n"
            "    size: 1M\n"
            "stderr:\n"
            "  target: file\n"
            "  file:\n"
            "    name: err.log\n"
            "    time: 1d\n"
        ))
        cfg = load_config(path)
        assert cfg.stdout.mode is LogMode.TEE
        assert cfg.stdout.max_size == 1024 * 1024
        assert cfg.stderr.max_age == 86400

    def test_env_var_path(self, tmp_path, monkeypatch):
        path = self._write(tmp_path, "stderr:\n  target: file\n  file: {name: e.log}\n")
        monkeypatch.setenv("MLOG_CONFIG", path)
        assert load_config().stderr.path == "e.log"

    def test_missing_default_is_passthrough(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MLOG_CONFIG", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert load_config() == LogConfig()

    def test_missing_explicit_file_is_an_error(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "nope.yml"))

    def test_malformed_yaml(self, tmp_path):
        path = self._write(tmp_path, "stdout: [unclosed\n")
        with pytest.raises(ConfigError):
            load_yaml(path)

    def test_num_zero_rejected_at_load(self, tmp_path):
        path = self._write(tmp_path, "stdout:\n  target: file\n  file: {name: o.log, num: 0}\n")
        with pytest.raises(ConfigError):
            load_config(path)
