"""Item placement: mapping prefab items onto avatar attachment slots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from okaeri_installer.core.constants import CONTAINER_SUFFIX, ITEMS_CONTAINER
from okaeri_installer.descriptor.models import PackageDescriptor
from okaeri_installer.exceptions import AlreadyInstalledError, StructuralError
from okaeri_installer.host.hierarchy import ORIGIN, BoneSlot, Node
from okaeri_installer.host.models import HostState

logger = logging.getLogger(__name__)

# Ordered: the first suffix an item name ends with decides its bone.
SLOT_SUFFIXES: tuple[tuple[str, BoneSlot], ...] = (
    ("Head", BoneSlot.HEAD),
    ("Neck", BoneSlot.NECK),
    ("Chest", BoneSlot.CHEST),
    ("Back", BoneSlot.CHEST),
    ("HandL", BoneSlot.LEFT_HAND),
    ("HandR", BoneSlot.RIGHT_HAND),
    ("LowerLegL", BoneSlot.LEFT_LOWER_LEG),
    ("LowerLegR", BoneSlot.RIGHT_LOWER_LEG),
)


def resolve_slot(item_name: str) -> BoneSlot | None:
    """Bone for ``item_name``, or ``None`` when no suffix matches."""
    for suffix, slot in SLOT_SUFFIXES:
        if item_name.endswith(suffix):
            return slot
    return None


@dataclass
class Placement:
    """One planned move of a prefab node under a host node."""

    item: Node
    target: Node
    label: str
    reset_position: bool = False


@dataclass
class PlacementPlan:
    placements: list[Placement] = field(default_factory=list)
    new_containers: list[Node] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def _bone_node(host: HostState, slot: BoneSlot) -> Node:
    node = host.bone(slot)
    if node is None:
        raise StructuralError(f"Avatar {host.name} has no {slot.value} bone")
    return node


def plan_placement(prefab: Node, host: HostState) -> PlacementPlan:
    """Work out where every prefab item goes, without moving anything.

    Raises:
        AlreadyInstalledError: If a same-named node already occupies a target.
        StructuralError: If a mapped bone is missing from the avatar.
    """
    plan = PlacementPlan()
    planned: set[tuple[Node, str]] = set()

    def _claim(target: Node, name: str, slot: str) -> None:
        if target.child(name) is not None or (target, name) in planned:
            raise AlreadyInstalledError(name, slot)
        planned.add((target, name))

    for item in prefab.children:
        if item.name.endswith(CONTAINER_SUFFIX):
            container = host.root.child(item.name)
            if container is None:
                names = [child.name for child in item.children]
                duplicate = next((n for i, n in enumerate(names) if n in names[:i]), None)
                if duplicate is not None:
                    raise AlreadyInstalledError(duplicate, item.name)
                _claim(host.root, item.name, host.name)
                plan.new_containers.append(item)
                continue
            for child in item.children:
                _claim(container, child.name, item.name)
                plan.placements.append(Placement(child, container, item.name))
            continue

        slot = resolve_slot(item.name)
        if slot is None:
            plan.skipped.append(item.name)
            continue
        bone = _bone_node(host, slot)
        _claim(bone, item.name, slot.value)
        plan.placements.append(Placement(item, bone, slot.value, reset_position=True))
    return plan


def apply_placement(plan: PlacementPlan, host: HostState) -> list[str]:
    """Reparent the planned items; returns one description per move."""
    moved: list[str] = []
    for container in plan.new_containers:
        host.root.add_child(container)
        moved.append(f"{container.name} -> {host.name}")
    for placement in plan.placements:
        placement.target.add_child(placement.item)
        if placement.reset_position:
            placement.item.local_position = ORIGIN
        moved.append(f"{placement.item.name} -> {placement.label}")
    for name in plan.skipped:
        logger.debug("No attachment slot for %s, skipped", name)
    return moved


def deactivate_asset_item(host: HostState, item_name: str) -> bool:
    """Hide the main asset item inside the items container."""
    item = host.root.find(f"{ITEMS_CONTAINER}/{item_name}") if item_name else None
    if item is None:
        return False
    item.active = False
    return True


def remove_items(host: HostState, items: Iterable[Node]) -> list[str]:
    """Detach ``items`` and drop container nodes left empty by the removal."""
    removed: list[str] = []
    touched_containers: list[Node] = []
    for node in items:
        parent = node.parent
        node.detach()
        removed.append(node.name)
        if (
            parent is not None
            and parent.parent is host.root
            and parent.name.endswith(CONTAINER_SUFFIX)
            and parent not in touched_containers
        ):
            touched_containers.append(parent)

    for container in touched_containers:
        if not container.children and container.parent is host.root:
            container.detach()
            removed.append(container.name)
    return removed


@dataclass
class AdjustableItems:
    """Avatar nodes the user may reposition or rescale after install."""

    movable: list[Node] = field(default_factory=list)
    scalable: list[Node] = field(default_factory=list)


def find_avatar_item(host: HostState, item_path: str, asset_item: str) -> Node | None:
    """Locate a movable/scalable item on the avatar.

    Names starting with ``asset_item`` live below the items container and
    may be paths (``\\`` or ``/`` separated). Other names sit directly under
    their mapped bone.

    Raises:
        StructuralError: If the container is missing or the name has no bone.
    """
    if asset_item and item_path.startswith(asset_item):
        container = host.root.child(ITEMS_CONTAINER)
        if container is None:
            raise StructuralError(f"Avatar {host.name} has no {ITEMS_CONTAINER} container")
        return container.find(item_path.replace("\\", "/"))

    slot = resolve_slot(item_path)
    if slot is None:
        raise StructuralError(f"{item_path} is not on the avatar armature")
    return _bone_node(host, slot).child(item_path)


def resolve_adjustable_items(descriptor: PackageDescriptor, host: HostState) -> AdjustableItems:
    """Resolve the descriptor's movable and scalable item names on ``host``."""

    def _collect(names: tuple[str, ...]) -> list[Node]:
        found = []
        for name in names:
            node = find_avatar_item(host, name, descriptor.item_name)
            if node is not None:
                found.append(node)
        return found

    return AdjustableItems(
        movable=_collect(descriptor.movable_items),
        scalable=_collect(descriptor.scalable_items),
    )
