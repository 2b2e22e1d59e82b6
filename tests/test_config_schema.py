"""Tests for the unified configuration schema."""

import pytest
from pydantic import ValidationError

from issue_sync.config_schema import (
    ProjectConfig,
    SyncConfig,
    UnifiedConfig,
    build_config,
    to_fallbacks,
)


class TestUnifiedConfig:
    def test_zero_config(self):
        config = UnifiedConfig()

        assert config.server.snapshot is None
        assert config.projects == {}
        assert config.sync.recursive is True
        assert config.sync.state_dir == ".issue_sync"
        assert config.logging.level == "INFO"

    def test_frozen(self):
        with pytest.raises(ValidationError):
            SyncConfig().recursive = False

    @pytest.mark.parametrize("max_age", [-1, 10**9])
    def test_max_age_bounds(self, max_age):
        with pytest.raises(ValidationError):
            SyncConfig(max_age_seconds=max_age)

    def test_state_dir_not_empty(self):
        with pytest.raises(ValidationError):
            SyncConfig(state_dir="")


class TestBuildConfig:
    def test_empty(self):
        assert build_config({}) == UnifiedConfig()

    def test_sections(self):
        config = build_config(
            {
                "server": {"snapshot": "issues.yml", "server_id": "srv"},
                "projects": {
                    "app": {"root": "/work/app", "snapshot": "app.yml"},
                    "lib": "/work/lib",
                },
                "sync": {"max_age_seconds": 3600, "recursive": False},
                "logging": {"level": "DEBUG", "file": "/tmp/x.log"},
            }
        )

        assert config.server.snapshot == "issues.yml"
        assert config.projects["app"] == ProjectConfig(
            root="/work/app", snapshot="app.yml"
        )
        assert config.projects["lib"].root == "/work/lib"
        assert config.sync.max_age_seconds == 3600
        assert config.logging.file == "/tmp/x.log"

    def test_null_projects_section(self):
        assert build_config({"projects": None}).projects == {}

    def test_invalid_section_raises(self):
        with pytest.raises(ValidationError):
            build_config({"sync": {"recursive": "sometimes"}})


class TestToFallbacks:
    def test_zero_config_fallbacks(self):
        assert to_fallbacks(UnifiedConfig()) == {
            "recursive": True,
            "state_dir": ".issue_sync",
            "projects": {},
            "project_snapshots": {},
        }

    def test_full_fallbacks(self):
        config = build_config(
            {
                "server": {"snapshot": "issues.yml", "server_id": "srv"},
                "projects": {
                    "app": {"root": "/work/app", "snapshot": "app.yml"},
                    "lib": "/work/lib",
                },
                "sync": {"max_age_seconds": 0},
            }
        )

        fallbacks = to_fallbacks(config)

        assert fallbacks["snapshot"] == "issues.yml"
        assert fallbacks["server_id"] == "srv"
        assert fallbacks["max_age_seconds"] == 0
        assert fallbacks["projects"] == {"app": "/work/app", "lib": "/work/lib"}
        assert fallbacks["project_snapshots"] == {"app": "app.yml"}
