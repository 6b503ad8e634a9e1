"""Fixed ceilings and reserved names of the avatar framework."""

from __future__ import annotations

# Total synced-parameter budget of an avatar.
MAX_PARAMETER_COST: int = 256

# Maximum number of controls a single expressions menu can hold.
MAX_MENU_CONTROLS: int = 8

# Name of the container node placed directly under the avatar root.
ITEMS_CONTAINER: str = "Items"

# Prefab children whose name ends with this suffix are merged into a
# same-named container instead of an armature bone.
CONTAINER_SUFFIX: str = "Items"

# Parameters owned by the framework itself. They exist on every FX graph and
# never count as a conflict.
RESERVED_PARAMETERS: frozenset[str] = frozenset(
    {
        "IsLocal",
        "Viseme",
        "Voice",
        "GestureLeft",
        "GestureRight",
        "GestureLeftWeight",
        "GestureRightWeight",
        "AngularY",
        "VelocityX",
        "VelocityY",
        "VelocityZ",
        "VelocityMagnitude",
        "Upright",
        "Grounded",
        "Seated",
        "AFK",
        "TrackingType",
        "VRMode",
        "MuteSelf",
        "InStation",
        "Earmuffs",
        "IsOnFriendsList",
        "AvatarVersion",
        "IsAnimatorEnabled",
        "PreviewMode",
        "ScaleModified",
        "ScaleFactor",
        "ScaleFactorInverse",
        "EyeHeightAsMeters",
        "EyeHeightAsPercent",
        "Supine",
        "GroundProximity",
    }
)
