"""Tests for configuration loading."""

from pathlib import Path

import pytest

from gitlogue.config import LoggingConfig, PlaybackConfig, Settings, SourceConfig, UIConfig, load_env
from gitlogue.errors import InvalidSpeedRuleError
from gitlogue.models import DiffLine
from gitlogue.speed import SpeedRule


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SPEED", "LINE_PAUSE", "SPEED_RULES", "REPO", "ORDER", "LOOP",
        "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE",
    ):
        monkeypatch.delenv(f"GITLOGUE_{name}", raising=False)


class TestDefaults:
    """Test default values and validation."""

    def test_defaults(self):
        """Settings() gives the documented defaults."""
        settings = Settings()
        assert settings.playback.speed_ms == 30.0
        assert settings.playback.max_checkpoints == 10_000
        assert settings.playback.max_history == 1_000
        assert settings.source.order == "random"
        assert settings.source.repo_path == Path(".")
        assert settings.ui.poll_interval_ms == 8.0
        assert settings.logging.level == "WARNING"

    def test_playback_validation(self):
        """Non-positive speeds and limits are rejected."""
        with pytest.raises(ValueError):
            PlaybackConfig(speed_ms=0)
        with pytest.raises(ValueError):
            PlaybackConfig(line_pause_ms=-1)
        with pytest.raises(ValueError):
            PlaybackConfig(max_checkpoints=0)
        with pytest.raises(ValueError, match="max_history"):
            PlaybackConfig(max_history=0)

    def test_rules_from_strings_and_tables(self):
        """Rules may be given as compact strings or as tables."""
        config = PlaybackConfig(speed_rules=["added:5ms", {"kinds": ["removed"], "multiplier": 2}])
        assert all(isinstance(rule, SpeedRule) for rule in config.speed_rules)
        rules = config.rule_set()
        assert rules.resolve(DiffLine.added("x")) == 5
        assert rules.resolve(DiffLine.removed("x")) == 15

    def test_source_validation(self):
        """Unknown orders and modes are rejected."""
        with pytest.raises(ValueError):
            SourceConfig(order="sideways")
        with pytest.raises(ValueError):
            SourceConfig(diff_mode="everything")
        with pytest.raises(ValueError):
            SourceConfig(range_mode=True)
        with pytest.raises(ValueError):
            UIConfig(poll_interval_ms=0)

    def test_single_commit(self):
        """Only a plain commit, not a range, plays a single commit."""
        assert SourceConfig(commit="abc").single_commit
        assert not SourceConfig(commit="a..b", range_mode=True).single_commit
        assert not SourceConfig().single_commit


class TestLoggingConfig:
    """Test log level and format validation."""

    def test_values_are_normalized(self):
        config = LoggingConfig(level="debug", format="JSON")
        assert config.level == "DEBUG"
        assert config.format == "json"

    def test_unknown_level(self):
        """A level that logging does not know is rejected up front."""
        with pytest.raises(ValueError, match="level must be one of"):
            LoggingConfig(level="verbose")

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="format must be one of"):
            LoggingConfig(format="xml")

    def test_validate_catches_assigned_level(self):
        """Levels assigned after construction are checked by validate()."""
        settings = Settings()
        settings.logging.level = "loud"
        with pytest.raises(ValueError):
            settings.validate()


class TestFromEnv:
    """Test environment loading."""

    def test_reads_prefixed_variables(self, monkeypatch):
        """GITLOGUE_* variables fill every section."""
        monkeypatch.setenv("GITLOGUE_SPEED", "12")
        monkeypatch.setenv("GITLOGUE_SPEED_RULES", "removed:x2; added>=80:10ms")
        monkeypatch.setenv("GITLOGUE_ORDER", "ASC")
        monkeypatch.setenv("GITLOGUE_LOOP", "yes")
        monkeypatch.setenv("GITLOGUE_LOG_LEVEL", "debug")
        settings = Settings.from_env()
        assert settings.playback.speed_ms == 12.0
        assert len(settings.playback.speed_rules) == 2
        assert settings.playback.speed_rules[1].min_length == 80
        assert settings.source.order == "asc"
        assert settings.source.loop is True
        assert settings.logging.level == "DEBUG"

    def test_invalid_value_fails_validation(self, monkeypatch):
        """Invalid environment values fail validation."""
        monkeypatch.setenv("GITLOGUE_ORDER", "sideways")
        with pytest.raises(ValueError):
            Settings.from_env()

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("GITLOGUE_LOG_LEVEL", "verbose")
        with pytest.raises(ValueError):
            Settings.from_env()

    def test_invalid_rule(self, monkeypatch):
        """A malformed rule is reported as a speed rule error."""
        monkeypatch.setenv("GITLOGUE_SPEED_RULES", "added:fast")
        with pytest.raises(InvalidSpeedRuleError):
            Settings.from_env()

    def test_load_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("GITLOGUE_SPEED=44\n")
        assert load_env(str(env_file))
        assert Settings.from_env().playback.speed_ms == 44.0


class TestFromFile:
    """Test YAML and TOML loading."""

    def test_yaml(self, tmp_path):
        """A YAML file sets values in each section."""
        path = tmp_path / "gitlogue.yaml"
        path.write_text(
            "playback:\n"
            "  speed_ms: 20\n"
            "  max_history: 50\n"
            "  speed_rules:\n"
            "    - removed:x2\n"
            "    - {kinds: [added], min_length: 80, interval_ms: 5}\n"
            "source:\n"
            "  repo_path: /tmp/repo\n"
            "  order: desc\n"
            "  loop: true\n"
            "logging:\n"
            "  log_file: /tmp/gitlogue.log\n"
        )
        settings = Settings.from_file(path)
        assert settings.playback.speed_ms == 20
        assert settings.playback.max_history == 50
        assert len(settings.playback.speed_rules) == 2
        assert settings.source.repo_path == Path("/tmp/repo")
        assert settings.source.order == "desc"
        assert settings.source.loop is True
        assert settings.logging.log_file == Path("/tmp/gitlogue.log")

    def test_toml(self, tmp_path):
        """A TOML file is read with tomllib."""
        path = tmp_path / "gitlogue.toml"
        path.write_text(
            "[playback]\n"
            "speed_ms = 15\n"
            "speed_rules = [\"*<=4:1ms\"]\n"
            "[source]\n"
            "commit = \"v1..v2\"\n"
            "range_mode = true\n"
            "[ui]\n"
            "poll_interval_ms = 16\n"
        )
        settings = Settings.from_file(path)
        assert settings.playback.speed_ms == 15
        assert settings.playback.speed_rules[0].max_length == 4
        assert settings.source.range_mode
        assert settings.ui.poll_interval_ms == 16

    def test_missing_file(self, tmp_path):
        """A missing settings file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            Settings.from_file(tmp_path / "nope.yaml")

    def test_unsupported_format(self, tmp_path):
        """Only YAML and TOML files are read."""
        path = tmp_path / "gitlogue.ini"
        path.write_text("")
        with pytest.raises(ValueError):
            Settings.from_file(path)

    def test_to_dict(self):
        """Rules and paths are converted to plain values."""
        settings = Settings(playback=PlaybackConfig(speed_rules=["added:5ms"]))
        data = settings.to_dict()
        assert data["playback"]["speed_rules"] == [{"kinds": ["added"], "interval_ms": 5.0}]
        assert data["playback"]["max_history"] == 1_000
        assert data["source"]["repo_path"] == "."
