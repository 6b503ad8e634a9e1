"""Installer settings loaded from ``.okaeri/config.yaml``."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from okaeri_installer.engine.orchestrator import InstallOptions

logger = logging.getLogger(__name__)

CONFIG_DIR = ".okaeri"
CONFIG_FILE = "config.yaml"


class InstallDefaults(BaseModel):
    """Default install options; CLI flags override them."""

    install_items: bool = True
    install_layers: bool = True
    write_defaults_on: bool = False
    install_parameters: bool = True
    install_menu: bool = True

    def to_options(self) -> InstallOptions:
        return InstallOptions(**self.model_dump())


class InstallerSettings(BaseModel):
    """Top-level installer configuration."""

    configs_dir: str = "Configs"
    log_level: str = "WARNING"
    install: InstallDefaults = Field(default_factory=InstallDefaults)

    def configs_path(self, project_root: Path) -> Path:
        path = Path(self.configs_dir)
        return path if path.is_absolute() else project_root / path


def config_path(project_root: Path) -> Path:
    return project_root / CONFIG_DIR / CONFIG_FILE


def load_settings(project_root: Path) -> InstallerSettings:
    """Load settings for ``project_root``.

    A missing file yields defaults. A malformed file is logged and also
    yields defaults, so a broken config never blocks an install.
    """
    path = config_path(project_root)
    if not path.exists():
        return InstallerSettings()

    yaml = YAML(typ="safe")
    try:
        with path.open(encoding="utf-8") as handle:
            data = yaml.load(handle) or {}
        return InstallerSettings.model_validate(data)
    except (OSError, YAMLError, SchemaError) as exc:
        logger.warning("Ignoring invalid settings in %s: %s", path, exc)
        return InstallerSettings()
