"""Tests for the local descriptor catalog."""

from __future__ import annotations

import zlib
from pathlib import Path

from okaeri_installer.descriptor import descriptor_checksums, discover_descriptors, scan_catalog


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestDiscoverDescriptors:
    def test_keyed_by_package_name(self, tmp_path: Path) -> None:
        _write(tmp_path / "b.yaml", "name: Bunny Ears\nprefab: BunnyEars.yaml\n")
        _write(tmp_path / "c.yml", "name: Cat Tail\n")
        _write(tmp_path / "notes.txt", "name: Ignored\n")
        catalog = discover_descriptors(tmp_path)
        assert sorted(catalog) == ["Bunny Ears", "Cat Tail"]
        assert catalog["Bunny Ears"].prefab == "BunnyEars.yaml"

    def test_bad_and_nameless_files_are_skipped(self, tmp_path: Path) -> None:
        _write(tmp_path / "a.yaml", "name: [broken\n")
        _write(tmp_path / "b.yaml", "prefab: x.yaml\n")
        _write(tmp_path / "c.yaml", "name: Cat Tail\n")
        assert list(discover_descriptors(tmp_path)) == ["Cat Tail"]

    def test_first_file_wins_on_duplicate_name(self, tmp_path: Path) -> None:
        _write(tmp_path / "a.yaml", "name: Cat Tail\nitem_name: First\n")
        _write(tmp_path / "b.yaml", "name: Cat Tail\nitem_name: Second\n")
        assert discover_descriptors(tmp_path)["Cat Tail"].item_name == "First"

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert discover_descriptors(tmp_path / "nowhere") == {}


class TestChecksums:
    def test_crc32_per_file_stem(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "bunny.yaml", "name: Bunny Ears\n")
        expected = f"{zlib.crc32(path.read_bytes()) & 0xFFFFFFFF:08x}"
        assert descriptor_checksums(tmp_path) == {"bunny": expected}

    def test_scan_keeps_unreadable_entries(self, tmp_path: Path) -> None:
        _write(tmp_path / "a.yaml", "name: [broken\n")
        _write(tmp_path / "b.yaml", "name: Cat Tail\n")
        entries = scan_catalog(tmp_path)
        assert [entry.path.name for entry in entries] == ["a.yaml", "b.yaml"]
        assert entries[0].descriptor is None
        assert entries[1].descriptor.name == "Cat Tail"
        assert len(entries[0].checksum) == 8
