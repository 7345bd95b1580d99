"""
Tests for configuration loading.
"""

from pi_capacity.config import Config
from pi_capacity.models import DEFAULT_MULTI_TEAM_ROLES


class TestConfig:
    """Tests for the Config class."""

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PI_DATA_FILE", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("MULTI_TEAM_ROLES", raising=False)
        cfg = Config(str(tmp_path / "missing.yaml"))

        assert cfg.data_file == "capacity-data.json"
        assert cfg.log_level == "INFO"
        assert cfg.multi_team_roles == DEFAULT_MULTI_TEAM_ROLES
        assert cfg.default_iteration_weeks == 2

    def test_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PI_DATA_FILE", raising=False)
        monkeypatch.delenv("MULTI_TEAM_ROLES", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(
            "data:\n"
            "  file: /var/lib/planner/data.json\n"
            "pi:\n"
            "  iteration_duration_weeks: 3\n"
            "roles:\n"
            "  multi_team:\n"
            "    - Architect\n"
        )
        cfg = Config(str(path))

        assert cfg.data_file == "/var/lib/planner/data.json"
        assert cfg.default_iteration_weeks == 3
        assert cfg.multi_team_roles == ("Architect",)

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PI_DATA_FILE", "/tmp/override.json")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("MULTI_TEAM_ROLES", "Product Owner, Scrum Master")
        cfg = Config(str(tmp_path / "missing.yaml"))

        assert cfg.data_file == "/tmp/override.json"
        assert cfg.log_level == "DEBUG"
        assert cfg.multi_team_roles == ("Product Owner", "Scrum Master")

    def test_set(self, tmp_path):
        cfg = Config(str(tmp_path / "missing.yaml"))
        cfg.set("pi", "iteration_duration_weeks", 4)

        assert cfg.get("pi", "iteration_duration_weeks") == 4
        assert cfg.get("pi", "missing", "fallback") == "fallback"
