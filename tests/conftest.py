from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from ruamel.yaml import YAML

from okaeri_installer.descriptor import PackageAssets, PackageDescriptor, load_package_assets
from okaeri_installer.host import (
    BoneSlot,
    ControlType,
    ExpressionParameter,
    GraphParameter,
    HostState,
    Layer,
    LayerGraph,
    LayerKind,
    Menu,
    MenuControl,
    Node,
    ParameterList,
    ParameterType,
    PlayableLayer,
    ValueType,
)

BONE_PATHS: dict[BoneSlot, str] = {
    BoneSlot.HIPS: "Armature/Hips",
    BoneSlot.CHEST: "Armature/Hips/Spine/Chest",
    BoneSlot.NECK: "Armature/Hips/Spine/Chest/Neck",
    BoneSlot.HEAD: "Armature/Hips/Spine/Chest/Neck/Head",
    BoneSlot.LEFT_HAND: "Armature/Hips/Spine/Chest/LeftArm/LeftHand",
    BoneSlot.RIGHT_HAND: "Armature/Hips/Spine/Chest/RightArm/RightHand",
    BoneSlot.LEFT_LOWER_LEG: "Armature/Hips/LeftUpperLeg/LeftLowerLeg",
    BoneSlot.RIGHT_LOWER_LEG: "Armature/Hips/RightUpperLeg/RightLowerLeg",
}

PREFAB: dict[str, Any] = {
    "name": "BunnyEarsPrefab",
    "children": [
        {
            "name": "Items",
            "children": [
                {"name": "BunnyEars", "children": [{"name": "Left"}, {"name": "Right"}]},
                {"name": "BunnyToggles"},
            ],
        },
        {"name": "BowHead", "position": [0.1, 0.2, 0.3]},
        {"name": "RingHandL"},
        {"name": "Sparkles"},
    ],
}

FX_WD_OFF: dict[str, Any] = {
    "name": "BunnyFX",
    "layers": [
        {"name": "Bunny Ears Toggle", "bindings": ["BunnyEars"]},
        {"name": "Bunny Color", "bindings": ["BunnyColor"]},
    ],
    "parameters": [
        {"name": "BunnyEars", "type": "bool", "default": False},
        {"name": "BunnyColor", "type": "int", "default": 0},
        {"name": "GestureLeft", "type": "int", "default": 0},
    ],
}

FX_WD_ON: dict[str, Any] = {
    "name": "BunnyFX_WD",
    "layers": [
        {"name": "Bunny Ears Toggle", "bindings": ["BunnyEars"], "body": {"write_defaults": True}},
        {"name": "Bunny Color", "bindings": ["BunnyColor"], "body": {"write_defaults": True}},
    ],
    "parameters": FX_WD_OFF["parameters"],
}

PARAMETERS: dict[str, Any] = {
    "name": "BunnyParameters",
    "parameters": [
        {"name": "BunnyEars", "type": "bool", "default": 1.0},
        {"name": "BunnyColor", "type": "int", "default": 0.0, "saved": False},
    ],
}

MENU: dict[str, Any] = {
    "name": "BunnyMenu",
    "controls": [
        {"name": "Ears", "type": "toggle", "parameter": "BunnyEars"},
        {"name": "Color", "type": "radial_puppet", "parameter": "BunnyColor"},
    ],
}


def write_yaml(path: Path, data: Any) -> Path:
    yaml = YAML()
    yaml.default_flow_style = False
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.dump(data, handle)
    return path


def build_armature() -> Node:
    root = Node("Avatar")
    root.add_child(Node("Body"))
    for path in BONE_PATHS.values():
        node = root
        for part in path.split("/"):
            existing = node.child(part)
            node = existing if existing is not None else node.add_child(Node(part))
    return root


def build_host(name: str = "Avatar") -> HostState:
    fx_graph = LayerGraph(
        name=f"{name}_FX",
        layers=[Layer("Base"), Layer("Hand Gestures", bindings=["GestureLeft"])],
        parameters=[
            GraphParameter("GestureLeft", ParameterType.INT, 0),
            GraphParameter("Smile", ParameterType.FLOAT, 0.0),
        ],
    )
    return HostState(
        name=name,
        root=build_armature(),
        bones=dict(BONE_PATHS),
        playable_layers=[
            PlayableLayer(LayerKind.BASE),
            PlayableLayer(LayerKind.GESTURE),
            PlayableLayer(LayerKind.FX, graph=fx_graph, is_default=False),
        ],
        parameters=ParameterList(
            name=f"{name}_Parameters",
            parameters=[ExpressionParameter("Smile", ValueType.FLOAT, 0.0)],
        ),
        menu=Menu(
            name=f"{name}_Menu",
            controls=[
                MenuControl(
                    "Emotes",
                    ControlType.SUB_MENU,
                    submenu=Menu("Emotes", [MenuControl("Wave", parameter="VRCEmote", value=1)]),
                ),
                MenuControl("Smile", ControlType.TOGGLE, parameter="Smile"),
            ],
        ),
    )


def write_package(directory: Path) -> Path:
    write_yaml(directory / "BunnyEars.yaml", PREFAB)
    write_yaml(directory / "FX" / "BunnyFX.yaml", FX_WD_OFF)
    write_yaml(directory / "FX" / "BunnyFX_WD.yaml", FX_WD_ON)
    write_yaml(directory / "Expressions" / "BunnyParameters.yaml", PARAMETERS)
    write_yaml(directory / "Expressions" / "BunnyMenu.yaml", MENU)
    return directory


@pytest.fixture()
def host() -> HostState:
    return build_host()


@pytest.fixture()
def package_dir(tmp_path: Path) -> Path:
    return write_package(tmp_path / "packages" / "BunnyEars")


@pytest.fixture()
def descriptor(package_dir: Path) -> PackageDescriptor:
    return PackageDescriptor(
        name="Bunny Ears",
        base_path=str(package_dir),
        prefab="BunnyEars.yaml",
        item_name="BunnyEars",
        fx_graph_wd_off="FX/BunnyFX.yaml",
        fx_graph_wd_on="FX/BunnyFX_WD.yaml",
        parameters="Expressions/BunnyParameters.yaml",
        menu="Expressions/BunnyMenu.yaml",
        movable_items=("BowHead", "BunnyEars\\Left"),
        scalable_items=("RingHandL",),
    )


@pytest.fixture()
def assets(descriptor: PackageDescriptor) -> PackageAssets:
    return load_package_assets(descriptor)


@pytest.fixture()
def yaml_file():
    return write_yaml
