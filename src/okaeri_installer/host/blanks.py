"""Blank default documents for avatars that lack one."""

from __future__ import annotations

from .models import LayerGraph, Menu, ParameterList


def blank_fx_graph(avatar_name: str) -> LayerGraph:
    """Empty FX graph named after the avatar."""
    return LayerGraph(name=f"{avatar_name}_FX")


def blank_parameters(avatar_name: str) -> ParameterList:
    """Empty expression parameter list named after the avatar."""
    return ParameterList(name=f"{avatar_name}_Parameters")


def blank_menu(avatar_name: str) -> Menu:
    """Empty expressions menu named after the avatar."""
    return Menu(name=f"{avatar_name}_Menu")
