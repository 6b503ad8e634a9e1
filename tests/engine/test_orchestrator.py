"""Tests for install / uninstall orchestration."""

from __future__ import annotations

from pathlib import Path

import pytest

from okaeri_installer.descriptor import PackageAssets, PackageDescriptor
from okaeri_installer.engine import orchestrator
from okaeri_installer.engine.log import MergeLog
from okaeri_installer.engine.orchestrator import InstallOptions, install, is_installed, uninstall
from okaeri_installer.engine.phases import INSTALL_SEQUENCE, UNINSTALL_SEQUENCE
from okaeri_installer.exceptions import (
    BudgetExceededError,
    CapacityError,
    ConflictError,
    StructuralError,
    ValidationError,
)
from okaeri_installer.host import (
    BoneSlot,
    ControlType,
    ExpressionParameter,
    HostState,
    LayerKind,
    Menu,
    MenuControl,
    Node,
    ParameterList,
    PlayableLayer,
    ValueType,
)
from okaeri_installer.host.models import host_state_to_dict

HEAD = "Armature/Hips/Spine/Chest/Neck/Head"


def _fingerprint(host: HostState) -> dict:
    fx = host.fx_layer()
    return {
        "items": sorted(node.name for node in host.root.descendants()),
        "shape": host.root.shape(),
        "fx_layers": sorted(fx.graph.layer_names()) if fx and fx.graph else None,
        "fx_parameters": sorted(fx.graph.parameter_names()) if fx and fx.graph else None,
        "parameters": sorted(host.parameters.names()) if host.parameters else None,
        "menu": host.menu.shape() if host.menu else None,
    }


def _lines(log) -> list[str]:
    return log.formatted()


class TestInstall:
    def test_merges_every_category(self, descriptor: PackageDescriptor, host: HostState) -> None:
        result = install(descriptor, host)

        assert host.root.find("Items/BunnyEars/Left") is not None
        assert host.root.find("Items/BunnyEars").active is False
        assert host.root.find(f"{HEAD}/BowHead") is not None
        assert host.root.find("Sparkles") is None

        fx = host.fx_layer()
        assert fx.graph.name == "Avatar_FX"
        assert fx.graph.layer_names() == ["Base", "Hand Gestures", "Bunny Ears Toggle", "Bunny Color"]
        assert fx.graph.parameter_names() == ["GestureLeft", "Smile", "BunnyEars", "BunnyColor"]
        assert fx.is_default is False

        assert host.parameters.names() == ["Smile", "BunnyEars", "BunnyColor"]
        control = host.menu.controls[-1]
        assert control.name == "Bunny Ears"
        assert control.type is ControlType.SUB_MENU
        assert control.submenu.name == "BunnyMenu"

        assert result.phases == list(INSTALL_SEQUENCE)
        assert result.log.formatted()[-1] == "s|Bunny Ears installed successfully!"
        assert result.log.has_errors is False

    def test_then_is_installed(self, descriptor: PackageDescriptor, host: HostState) -> None:
        install(descriptor, host)
        installed, reasons = is_installed(descriptor, host)
        assert installed is True
        assert any("BowHead" in reason for reason in reasons)

    def test_fresh_host_is_not_installed(self, descriptor: PackageDescriptor, host: HostState) -> None:
        assert is_installed(descriptor, host) == (False, [])

    def test_write_defaults_on_variant(self, descriptor: PackageDescriptor, host: HostState) -> None:
        install(descriptor, host, InstallOptions(write_defaults_on=True))
        layer = host.fx_layer().graph.layers[-1]
        assert layer.body == {"write_defaults": True}

    def test_options_skip_categories(self, descriptor: PackageDescriptor, host: HostState) -> None:
        before = _fingerprint(host)
        options = InstallOptions(
            install_items=False, install_layers=False, install_parameters=False, install_menu=False
        )
        result = install(descriptor, host, options)
        assert _fingerprint(host) == before
        # Skipped steps still pass through their phases.
        assert result.phases == list(INSTALL_SEQUENCE)

    def test_blank_documents_created_when_missing(self, descriptor: PackageDescriptor, host: HostState) -> None:
        host.playable_layers = [PlayableLayer(LayerKind.FX)]
        host.parameters = None
        host.menu = None
        install(descriptor, host)
        assert host.fx_layer().graph.name == "Avatar_FX"
        assert host.fx_layer().graph.layer_names() == ["Bunny Ears Toggle", "Bunny Color"]
        assert host.parameters.name == "Avatar_Parameters"
        assert host.parameters.names() == ["BunnyEars", "BunnyColor"]
        assert host.menu.name == "Avatar_Menu"
        assert [control.name for control in host.menu.controls] == ["Bunny Ears"]

    def test_existing_parameters_are_updated_not_duplicated(
        self, descriptor: PackageDescriptor, host: HostState
    ) -> None:
        host.parameters.parameters.append(ExpressionParameter("BunnyEars", ValueType.BOOL, 0.0))
        install(descriptor, host)
        assert host.parameters.names() == ["Smile", "BunnyEars", "BunnyColor"]
        assert host.parameters.find("BunnyEars").default_value == 1.0


class TestInstallFailures:
    def test_second_install_fails_at_conflict_check(self, descriptor: PackageDescriptor, host: HostState) -> None:
        install(descriptor, host)
        after_first = _fingerprint(host)

        with pytest.raises(ConflictError) as excinfo:
            install(descriptor, host)

        error = excinfo.value
        assert error.failed_phase == "conflict_checking"
        lines = _lines(error.log)
        error_index = next(i for i, line in enumerate(lines) if line.startswith("e|"))
        assert "Asset items are already installed" in lines[error_index]
        assert not any(line.startswith("i|Installing") for line in lines)
        assert _fingerprint(host) == after_first

    def test_fx_layer_conflict(self, descriptor: PackageDescriptor, host: HostState, assets: PackageAssets) -> None:
        host.fx_layer().graph.layers.append(assets.fx_graph_wd_off.layers[0])
        with pytest.raises(ConflictError, match="already contains some layers"):
            install(descriptor, host)

    def test_budget_exceeded_leaves_host_unchanged(
        self, descriptor: PackageDescriptor, host: HostState, assets: PackageAssets
    ) -> None:
        host.parameters = ParameterList(
            name="Avatar_Parameters",
            parameters=[ExpressionParameter(f"Int{i}", ValueType.INT) for i in range(25)],
        )
        assets.parameters = ParameterList(
            parameters=[ExpressionParameter(f"BunnyInt{i}", ValueType.INT) for i in range(7)]
            + [ExpressionParameter(f"BunnyBool{i}", ValueType.BOOL) for i in range(4)]
        )
        before = host_state_to_dict(host)

        with pytest.raises(BudgetExceededError) as excinfo:
            install(descriptor, host, assets=assets)

        assert excinfo.value.failed_phase == "budget_checking"
        assert "not enough space" in str(excinfo.value.log)
        assert len(host.parameters.parameters) == 25
        assert host_state_to_dict(host) == before

    def test_budget_not_checked_without_parameters(
        self, descriptor: PackageDescriptor, host: HostState
    ) -> None:
        host.parameters = ParameterList(
            parameters=[ExpressionParameter(f"Int{i}", ValueType.INT) for i in range(32)]
        )
        install(descriptor, host, InstallOptions(install_parameters=False))
        assert len(host.parameters.parameters) == 32

    def test_full_menu_raises_capacity_error(self, descriptor: PackageDescriptor, host: HostState) -> None:
        host.menu.controls = [MenuControl(f"Control{i}") for i in range(8)]
        before = host_state_to_dict(host)
        with pytest.raises(CapacityError) as excinfo:
            install(descriptor, host)
        assert excinfo.value.failed_phase == "budget_checking"
        assert host_state_to_dict(host) == before

    def test_full_menu_ignored_for_package_without_menu(
        self, descriptor: PackageDescriptor, host: HostState
    ) -> None:
        host.menu.controls = [MenuControl(f"Control{i}") for i in range(8)]
        result = install(descriptor.model_copy(update={"menu": ""}), host)
        assert len(host.menu.controls) == 8
        assert "i|Asset has no expressions menu, skipping" in result.log.formatted()
        assert host.root.find("Items/BunnyEars") is not None

    def test_full_menu_accepted_when_submenu_present(self, descriptor: PackageDescriptor, host: HostState) -> None:
        host.menu.controls = [MenuControl(f"Control{i}") for i in range(7)]
        host.menu.controls.append(
            MenuControl("Bunny Ears", ControlType.SUB_MENU, submenu=Menu("BunnyMenu"))
        )
        result = install(descriptor, host)
        assert len(host.menu.controls) == 8
        assert "i|Asset expressions menu already installed, skipping" in result.log.formatted()

    def test_invalid_descriptor_fails_validation(self, descriptor: PackageDescriptor, host: HostState) -> None:
        broken = descriptor.model_copy(update={"item_name": " "})
        with pytest.raises(ValidationError) as excinfo:
            install(broken, host)
        assert excinfo.value.failed_phase == "validating"
        assert [str(issue) for issue in excinfo.value.issues] == ["Invalid or empty item_name"]
        assert excinfo.value.log.formatted()[-1] == "i|Cleaning up"

    def test_no_rollback_of_finished_steps(
        self, descriptor: PackageDescriptor, host: HostState, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def failing_merge(host_graph, package_graph):
            raise ConflictError("Cannot merge BunnyFX into Avatar_FX: duplicate layers")

        monkeypatch.setattr(orchestrator, "merge_graphs", failing_merge)
        with pytest.raises(ConflictError) as excinfo:
            install(descriptor, host)

        error = excinfo.value
        assert error.failed_phase == "installing_layers"
        # Items were placed before the failure and stay on the avatar.
        assert host.root.find(f"{HEAD}/BowHead") is not None
        assert host.fx_layer().graph.layer_names() == ["Base", "Hand Gestures"]
        assert host.parameters.names() == ["Smile"]
        lines = _lines(error.log)
        assert "i|Installing items on avatar" in lines
        assert "e|Cannot merge BunnyFX into Avatar_FX: duplicate layers" in lines

    def test_missing_bone_is_structural_error(self, descriptor: PackageDescriptor, host: HostState) -> None:
        del host.bones[BoneSlot.HEAD]
        with pytest.raises(StructuralError) as excinfo:
            install(descriptor, host)
        assert excinfo.value.failed_phase == "installing_items"

    def test_unexpected_error_is_logged_and_propagated(
        self, descriptor: PackageDescriptor, host: HostState, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def explode(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(orchestrator, "merge_parameters", explode)
        log = MergeLog()
        with pytest.raises(RuntimeError, match="disk on fire"):
            install(descriptor, host, log=log)
        assert "e|Unexpected error: disk on fire" in log.formatted()
        assert log.formatted()[-1] == "i|Cleaning up"


class TestScratchWorkspace:
    def test_removed_after_success(self, descriptor: PackageDescriptor, host: HostState, tmp_path: Path) -> None:
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        install(descriptor, host, scratch_dir=scratch)
        assert list(scratch.iterdir()) == []

    def test_removed_after_failure(
        self,
        descriptor: PackageDescriptor,
        host: HostState,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        scratch = tmp_path / "scratch"
        scratch.mkdir()

        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(orchestrator, "insert_submenu", explode)
        with pytest.raises(RuntimeError):
            install(descriptor, host, scratch_dir=scratch)
        assert list(scratch.iterdir()) == []


class TestUninstall:
    def test_restores_host(self, descriptor: PackageDescriptor, host: HostState) -> None:
        before = _fingerprint(host)
        install(descriptor, host)
        assert _fingerprint(host) != before

        result = uninstall(descriptor, host)

        assert _fingerprint(host) == before
        assert result.phases == list(UNINSTALL_SEQUENCE)
        assert result.log.formatted()[-1] == "s|Bunny Ears uninstalled successfully!"
        assert is_installed(descriptor, host) == (False, [])

    def test_restores_host_with_existing_container(
        self, descriptor: PackageDescriptor, host: HostState
    ) -> None:
        host.root.add_child(Node("Items", [Node("OtherAsset")]))
        before = _fingerprint(host)
        install(descriptor, host)
        uninstall(descriptor, host)
        assert _fingerprint(host) == before

    def test_nested_menu_is_found_and_removed(self, descriptor: PackageDescriptor, host: HostState) -> None:
        emotes = host.menu.controls[0].submenu
        nested = Menu(
            "Accessories",
            [
                MenuControl("Hat"),
                MenuControl("Bunny Ears", ControlType.SUB_MENU, submenu=Menu("BunnyMenu")),
                MenuControl("Scarf"),
            ],
        )
        emotes.controls.append(MenuControl("Accessories", ControlType.SUB_MENU, submenu=nested))

        installed, reasons = is_installed(descriptor, host)
        assert installed is True
        assert reasons == ["Expressions menu BunnyMenu already on avatar"]

        uninstall(descriptor, host)

        assert [c.name for c in host.menu.controls] == ["Emotes", "Smile"]
        assert [c.name for c in emotes.controls] == ["Wave", "Accessories"]
        assert [c.name for c in nested.controls] == ["Hat", "Scarf"]

    def test_reserved_fx_parameter_added_by_package_is_kept(
        self, descriptor: PackageDescriptor, host: HostState
    ) -> None:
        graph = host.fx_layer().graph
        graph.parameters = [p for p in graph.parameters if p.name != "GestureLeft"]
        install(descriptor, host)
        uninstall(descriptor, host)
        assert host.fx_layer().graph.parameter_names() == ["Smile", "GestureLeft"]

    def test_not_installed_is_a_no_op(self, descriptor: PackageDescriptor, host: HostState) -> None:
        before = _fingerprint(host)
        result = uninstall(descriptor, host)
        assert _fingerprint(host) == before
        assert "i|\tBunny Ears is not installed on Avatar" in result.log.formatted()

    def test_no_fx_slot_raises(self, descriptor: PackageDescriptor, host: HostState) -> None:
        host.playable_layers = []
        with pytest.raises(StructuralError) as excinfo:
            uninstall(descriptor, host)
        assert excinfo.value.failed_phase == "detecting"
        assert excinfo.value.log.has_errors
