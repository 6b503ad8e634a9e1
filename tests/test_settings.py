"""Tests for installer settings loading."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from okaeri_installer.engine import InstallOptions
from okaeri_installer.settings import InstallerSettings, config_path, load_settings


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path)
        assert settings == InstallerSettings()
        assert settings.install.to_options() == InstallOptions()

    def test_reads_config(self, tmp_path: Path, yaml_file) -> None:
        yaml_file(
            config_path(tmp_path),
            {
                "configs_dir": "Descriptors",
                "log_level": "INFO",
                "install": {"write_defaults_on": True, "install_menu": False},
            },
        )
        settings = load_settings(tmp_path)
        assert settings.configs_path(tmp_path) == tmp_path / "Descriptors"
        assert settings.log_level == "INFO"
        options = settings.install.to_options()
        assert options.write_defaults_on is True
        assert options.install_menu is False
        assert options.install_items is True

    def test_absolute_configs_dir(self, tmp_path: Path) -> None:
        settings = InstallerSettings(configs_dir=str(tmp_path / "elsewhere"))
        assert settings.configs_path(Path("/project")) == tmp_path / "elsewhere"

    @pytest.mark.parametrize(
        "content",
        ["install: [not, a, mapping]\n", "configs_dir: [unclosed\n", "install:\n  install_menu: maybe\n"],
    )
    def test_invalid_file_falls_back_to_defaults(
        self, tmp_path: Path, content: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = config_path(tmp_path)
        path.parent.mkdir(parents=True)
        path.write_text(content, encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            settings = load_settings(tmp_path)
        assert settings == InstallerSettings()
        assert "Ignoring invalid settings" in caplog.text
