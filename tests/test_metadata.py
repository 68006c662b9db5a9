"""Tests for nwpack.metadata."""

from __future__ import annotations

import plistlib
from xml.etree import ElementTree

import pytest

from nwpack.errors import NotFoundError, ParseError
from nwpack.manifest import Manifest
from nwpack.metadata import (
    bundle_identifier,
    numeric_version,
    patch_plist,
    write_launcher,
    write_resource_manifest,
)

DEMO = Manifest(name="Demo", version="1.2.3")

PLACEHOLDERS = {
    "CFBundleDisplayName": "nwjs",
    "CFBundleName": "nwjs",
    "CFBundleVersion": "0.0.0",
    "CFBundleShortVersionString": "0.0",
    "CFBundleIdentifier": "io.nwjs.placeholder",
    "LSMinimumSystemVersion": "10.9",
}


class TestIdentifiers:
    def test_bundle_identifier_lowercases(self):
        assert bundle_identifier("Demo") == "io.nwpack.demo"
        assert bundle_identifier("MyApp") == "io.nwpack.myapp"

    @pytest.mark.parametrize(
        ("version", "expected"),
        [
            ("1.2.3", "1.2.3.0"),
            ("1.2.3-beta.4", "1.2.3.0"),
            ("1.2.3+build.9", "1.2.3.0"),
            ("2", "2.0.0.0"),
            ("1.2.3.4.5", "1.2.3.4"),
            ("01.002.3", "1.2.3.0"),
        ],
    )
    def test_numeric_version(self, version, expected):
        assert numeric_version(version) == expected


class TestPatchPlist:
    def test_fields_replaced(self, tmp_path):
        path = tmp_path / "Info.plist"
        path.write_bytes(plistlib.dumps(PLACEHOLDERS))

        patch_plist(path, DEMO)

        plist = plistlib.loads(path.read_bytes())
        assert plist["CFBundleDisplayName"] == "Demo"
        assert plist["CFBundleName"] == "Demo"
        assert plist["CFBundleVersion"] == "1.2.3"
        assert plist["CFBundleShortVersionString"] == "1.2.3"
        assert plist["CFBundleIdentifier"] == "io.nwpack.demo"

    def test_other_keys_preserved(self, tmp_path):
        path = tmp_path / "Info.plist"
        path.write_bytes(plistlib.dumps(PLACEHOLDERS))
        patch_plist(path, DEMO)
        assert plistlib.loads(path.read_bytes())["LSMinimumSystemVersion"] == "10.9"

    def test_xml_format_kept(self, tmp_path):
        path = tmp_path / "Info.plist"
        path.write_bytes(plistlib.dumps(PLACEHOLDERS, fmt=plistlib.FMT_XML))
        patch_plist(path, DEMO)
        assert path.read_bytes().startswith(b"<?xml")

    def test_binary_format_kept(self, tmp_path):
        path = tmp_path / "Info.plist"
        path.write_bytes(plistlib.dumps(PLACEHOLDERS, fmt=plistlib.FMT_BINARY))
        patch_plist(path, DEMO)
        data = path.read_bytes()
        assert data.startswith(b"bplist00")
        assert plistlib.loads(data)["CFBundleName"] == "Demo"

    def test_malformed(self, tmp_path):
        path = tmp_path / "Info.plist"
        path.write_text("<plist><dict><key>oops</dict>")
        with pytest.raises(ParseError):
            patch_plist(path, DEMO)

    def test_not_a_dictionary(self, tmp_path):
        path = tmp_path / "Info.plist"
        path.write_bytes(plistlib.dumps(["a", "b"]))
        with pytest.raises(ParseError, match="dictionary"):
            patch_plist(path, DEMO)

    def test_missing(self, tmp_path):
        with pytest.raises(NotFoundError):
            patch_plist(tmp_path / "Info.plist", DEMO)


class TestResourceManifest:
    NS = {"asm": "urn:schemas-microsoft-com:asm.v1"}

    def test_assembly_identity(self, tmp_path):
        path = tmp_path / "nw.exe.manifest"
        write_resource_manifest(path, DEMO, "ia32")

        identity = ElementTree.parse(path).getroot().find("asm:assemblyIdentity", self.NS)
        assert identity is not None
        assert identity.get("name") == "io.nwpack.demo"
        assert identity.get("version") == "1.2.3.0"
        assert identity.get("processorArchitecture") == "x86"

    def test_unknown_arch_is_wildcard(self, tmp_path):
        path = tmp_path / "nw.exe.manifest"
        write_resource_manifest(path, DEMO, "arm64")
        identity = ElementTree.parse(path).getroot().find("asm:assemblyIdentity", self.NS)
        assert identity.get("processorArchitecture") == "*"

    def test_name_is_escaped(self, tmp_path):
        path = tmp_path / "nw.exe.manifest"
        write_resource_manifest(path, Manifest(name="Tom & Jerry", version="1.0.0"), "x64")
        root = ElementTree.parse(path).getroot()
        assert root.findtext("asm:description", namespaces=self.NS) == "Tom & Jerry"


class TestLauncher:
    def test_script_and_desktop_entry(self, tmp_path):
        script = tmp_path / "Demo"
        desktop = tmp_path / "Demo.desktop"
        write_launcher(script, desktop, DEMO, executable="nw", icon="app.png")

        text = script.read_text()
        assert text.startswith("#!/bin/sh\n")
        assert 'exec "$HERE/nw" "$@"' in text
        assert script.stat().st_mode & 0o755 == 0o755

        entry = desktop.read_text()
        assert entry.startswith("[Desktop Entry]\n")
        assert "Name=Demo\n" in entry
        assert "Exec=Demo %U\n" in entry
        assert "Icon=app.png\n" in entry
