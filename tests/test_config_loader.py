"""Tests for issue_sync.config_loader: hierarchical config loading."""

import textwrap

import pytest
import yaml

from issue_sync.config_loader import (
    CONFIG_ENV_VAR,
    _interpolate_recursive,
    discover_config_files,
    ensure_config,
    interpolate_env_vars,
    load_hierarchical_config,
)


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with CWD and HOME in a temp dir and no explicit config."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


def _write(path, content):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


# -------------------------------------------------------------------------
# Env var interpolation
# -------------------------------------------------------------------------


class TestInterpolateEnvVars:
    """Tests for ${VAR} and ${VAR:-default} substitution."""

    def test_replaces_set_var(self, monkeypatch):
        monkeypatch.setenv("MY_SNAPSHOT", "issues.yml")
        assert interpolate_env_vars("${MY_SNAPSHOT}") == "issues.yml"

    def test_unset_var_replaced_with_empty(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert interpolate_env_vars("${UNSET_VAR_XYZ}") == ""

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert (
            interpolate_env_vars("${UNSET_VAR_XYZ:-fallback}")
            == "fallback"
        )

    def test_empty_env_var_uses_default(self, monkeypatch):
        monkeypatch.setenv("EMPTY_VAR", "")
        assert (
            interpolate_env_vars("${EMPTY_VAR:-fallback}") == "fallback"
        )

    def test_multiple_vars_in_one_string(self, monkeypatch):
        monkeypatch.setenv("ROOT_A", "/work")
        monkeypatch.setenv("NAME_A", "app")
        assert interpolate_env_vars("${ROOT_A}/${NAME_A}") == "/work/app"

    def test_literal_dollar_brace_no_closing(self):
        assert interpolate_env_vars("${NO_CLOSE") == "${NO_CLOSE"

    def test_nested_structures(self, monkeypatch):
        monkeypatch.setenv("APP_ROOT", "/work/app")
        data = {"projects": {"app": {"root": "${APP_ROOT}"}}, "n": [1, "x"]}
        assert _interpolate_recursive(data) == {
            "projects": {"app": {"root": "/work/app"}},
            "n": [1, "x"],
        }


# -------------------------------------------------------------------------
# Convention-based file discovery
# -------------------------------------------------------------------------


class TestDiscoverConfigFiles:
    """Tests for discover_config_files() precedence and filtering."""

    def test_env_var_takes_highest_precedence(self, isolated, monkeypatch):
        custom = _write(isolated / "custom.yml", "sync: {}\n")
        _write(isolated / ".issue_sync" / "config.yml", "sync: {}\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(custom))

        result = discover_config_files()

        assert result[0] == custom.resolve()
        assert len(result) == 2

    def test_project_before_global(self, isolated):
        proj = _write(isolated / ".issue_sync" / "config.yml", "a: 1\n")
        glob = _write(
            isolated / "home" / ".config" / "issue_sync" / "config.yml",
            "b: 2\n",
        )

        result = [p.resolve() for p in discover_config_files()]

        assert result == [proj.resolve(), glob.resolve()]

    def test_yaml_extension_discovered(self, isolated):
        alt = _write(isolated / ".issue_sync" / "config.yaml", "a: 1\n")
        assert [p.resolve() for p in discover_config_files()] == [
            alt.resolve()
        ]

    def test_no_files(self, isolated):
        assert discover_config_files() == []


# -------------------------------------------------------------------------
# Hierarchical merge
# -------------------------------------------------------------------------


class TestLoadHierarchicalConfig:
    """Tests for load_hierarchical_config() merge and interpolation."""

    def test_zero_config(self, isolated):
        assert load_hierarchical_config() == {}

    def test_project_keys_replace_global(self, isolated):
        _write(
            isolated / "home" / ".config" / "issue_sync" / "config.yml",
            """\
            server:
              snapshot: global.yml
            sync:
              recursive: false
            """,
        )
        _write(
            isolated / ".issue_sync" / "config.yml",
            """\
            server:
              server_id: project-id
            """,
        )

        merged = load_hierarchical_config()

        assert merged["server"] == {"server_id": "project-id"}
        assert merged["sync"] == {"recursive": False}

    def test_interpolation_applied(self, isolated, monkeypatch):
        monkeypatch.setenv("APP_SNAPSHOT", "/data/app.yml")
        _write(
            isolated / ".issue_sync" / "config.yml",
            """\
            projects:
              app:
                root: .
                snapshot: ${APP_SNAPSHOT}
            """,
        )

        merged = load_hierarchical_config()

        assert merged["projects"]["app"]["snapshot"] == "/data/app.yml"

    def test_non_dict_root_skipped(self, isolated):
        _write(isolated / ".issue_sync" / "config.yml", "- a\n- b\n")
        assert load_hierarchical_config() == {}

    def test_invalid_yaml_raises(self, isolated):
        _write(isolated / ".issue_sync" / "config.yml", "sync: [oops\n")
        with pytest.raises(yaml.YAMLError):
            load_hierarchical_config()


# -------------------------------------------------------------------------
# Bootstrapping
# -------------------------------------------------------------------------


class TestEnsureConfig:
    def test_creates_starter(self, isolated):
        path = ensure_config()

        assert path.resolve() == (isolated / ".issue_sync" / "config.yml").resolve()
        assert "issue-sync configuration" in path.read_text(encoding="utf-8")
        assert load_hierarchical_config() == {}

    def test_keeps_existing(self, isolated):
        existing = _write(isolated / ".issue_sync" / "config.yml", "a: 1\n")
        assert ensure_config().resolve() == existing.resolve()
        assert existing.read_text(encoding="utf-8") == "a: 1\n"
