"""Tests for the claw.yaml settings cascade."""

import pytest

from claw_context.errors import SettingsError
from claw_context.models import ErrorHandlingMode
from claw_context.settings import ContextSettingsManager


@pytest.fixture
def dirs(tmp_path):
    project = tmp_path / "project"
    nested = project / "src" / "deep"
    nested.mkdir(parents=True)
    global_dir = tmp_path / "global"
    global_dir.mkdir()
    return project, nested, global_dir


def _write_yaml(directory, text):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "claw.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestCascade:
    def test_defaults_without_config(self, dirs):
        _, nested, global_dir = dirs
        manager = ContextSettingsManager(start_dir=nested, global_config_dir=global_dir)

        assert manager.active_config_file() is None
        assert manager.load_limits().max_file_size_kb == 1024

    def test_local_config_found_upward(self, dirs):
        project, nested, global_dir = dirs
        local = _write_yaml(project / ".claw", "max_files_per_directory: 10\n")
        manager = ContextSettingsManager(start_dir=nested, global_config_dir=global_dir)

        assert manager.active_config_file() == local.resolve()
        assert manager.load_limits().max_files_per_directory == 10

    def test_global_used_when_no_local(self, dirs):
        _, nested, global_dir = dirs
        _write_yaml(global_dir, "error_handling_mode: strict\n")
        manager = ContextSettingsManager(start_dir=nested, global_config_dir=global_dir)

        assert manager.load_limits().error_handling_mode == ErrorHandlingMode.STRICT

    def test_local_wins_entirely(self, dirs):
        project, nested, global_dir = dirs
        _write_yaml(global_dir, "error_handling_mode: strict\nmax_file_size_kb: 5\n")
        _write_yaml(project / ".claw", "max_file_size_kb: 64\n")
        limits = ContextSettingsManager(start_dir=nested, global_config_dir=global_dir).load_limits()

        assert limits.max_file_size_kb == 64
        assert limits.error_handling_mode == ErrorHandlingMode.FLEXIBLE

    def test_overrides_beat_file_values(self, dirs):
        project, nested, global_dir = dirs
        _write_yaml(project / ".claw", "max_file_size_kb: 64\nexcluded_extensions: [png, .JPG]\n")
        limits = ContextSettingsManager(start_dir=nested, global_config_dir=global_dir).load_limits(
            max_file_size_kb=8, error_handling_mode=None
        )

        assert limits.max_file_size_kb == 8
        assert limits.excluded_extensions == ("png", "jpg")

    def test_unknown_keys_ignored(self, dirs):
        project, nested, global_dir = dirs
        _write_yaml(project / ".claw", "editor: vim\nmax_files_per_directory: 3\n")
        limits = ContextSettingsManager(start_dir=nested, global_config_dir=global_dir).load_limits()

        assert limits.max_files_per_directory == 3

    def test_empty_file_means_defaults(self, dirs):
        project, nested, global_dir = dirs
        _write_yaml(project / ".claw", "")

        assert ContextSettingsManager(start_dir=nested, global_config_dir=global_dir).get_settings() == {}


class TestInvalidSettings:
    def test_malformed_yaml(self, dirs):
        project, nested, global_dir = dirs
        _write_yaml(project / ".claw", "max_file_size_kb: [unclosed\n")

        with pytest.raises(SettingsError, match="Failed to parse"):
            ContextSettingsManager(start_dir=nested, global_config_dir=global_dir).load_limits()

    def test_non_mapping(self, dirs):
        project, nested, global_dir = dirs
        _write_yaml(project / ".claw", "- a\n- b\n")

        with pytest.raises(SettingsError, match="mapping"):
            ContextSettingsManager(start_dir=nested, global_config_dir=global_dir).load_limits()

    def test_invalid_value_names_field(self, dirs):
        project, nested, global_dir = dirs
        _write_yaml(project / ".claw", "error_handling_mode: lenient\n")

        with pytest.raises(SettingsError, match="error_handling_mode"):
            ContextSettingsManager(start_dir=nested, global_config_dir=global_dir).load_limits()

    def test_invalid_override_without_file(self, dirs):
        _, nested, global_dir = dirs

        with pytest.raises(SettingsError, match="max_files_per_directory"):
            ContextSettingsManager(start_dir=nested, global_config_dir=global_dir).load_limits(
                max_files_per_directory=0
            )
