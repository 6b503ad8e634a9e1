"""Package descriptor model and its static field schema."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BOOTH_URL = "https://okaeri-shop.booth.pm"
DEFAULT_GUMROAD_URL = "https://gum.okaeri.moe"


class PackageDescriptor(BaseModel):
    """Describes one installable asset package.

    Path fields are relative to ``base_path``. Blank strings mean "not set";
    whether that is acceptable is decided by :data:`DESCRIPTOR_SCHEMA`, not by
    the model, so an incomplete descriptor can still be loaded and reported on.
    """

    model_config = ConfigDict(frozen=True)

    name: str = ""
    base_path: str = ""
    booth_url: str = DEFAULT_BOOTH_URL
    gumroad_url: str = DEFAULT_GUMROAD_URL
    prefab: str = ""
    item_name: str = ""
    fx_graph_wd_off: str = ""
    fx_graph_wd_on: str = ""
    parameters: str = ""
    menu: str = ""
    materials_folder: str = ""
    movable_items: tuple[str, ...] = Field(default_factory=tuple)
    scalable_items: tuple[str, ...] = Field(default_factory=tuple)

    def resolve(self, relative: str) -> Path:
        """Resolve a package-relative path against ``base_path``."""
        return Path(self.base_path) / relative.replace("\\", "/")


@dataclass(frozen=True)
class FieldRule:
    """Schema entry for one descriptor field."""

    field: str
    required: bool
    path_checked: bool
    label: str


DESCRIPTOR_SCHEMA: tuple[FieldRule, ...] = (
    FieldRule("name", required=True, path_checked=False, label="Asset name"),
    FieldRule("base_path", required=True, path_checked=False, label="Asset path"),
    FieldRule("booth_url", required=True, path_checked=False, label="Booth URL"),
    FieldRule("gumroad_url", required=True, path_checked=False, label="Gumroad URL"),
    FieldRule("prefab", required=True, path_checked=True, label="Prefab"),
    FieldRule("item_name", required=True, path_checked=False, label="Asset item name"),
    FieldRule("fx_graph_wd_off", required=False, path_checked=True, label="FX graph (WD OFF)"),
    FieldRule("fx_graph_wd_on", required=False, path_checked=True, label="FX graph (WD ON)"),
    FieldRule("parameters", required=False, path_checked=True, label="Expression parameters"),
    FieldRule("menu", required=False, path_checked=True, label="Expressions menu"),
    FieldRule("materials_folder", required=False, path_checked=False, label="Materials folder"),
)
