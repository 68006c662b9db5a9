"""Platform metadata writers: Info.plist, resource manifests, launchers."""

from __future__ import annotations

import logging
import plistlib
import re
import stat
from pathlib import Path
from xml.parsers.expat import ExpatError

import jinja2

from . import fsutil
from .errors import BundleIOError, NotFoundError, ParseError
from .manifest import Manifest

logger = logging.getLogger(__name__)

IDENTIFIER_PREFIX = "io.nwpack"

_MANIFEST_ARCH: dict[str, str] = {"ia32": "x86", "x64": "amd64"}

_RESOURCE_MANIFEST = """\
<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<assembly xmlns="urn:schemas-microsoft-com:asm.v1" manifestVersion="1.0">
  <assemblyIdentity type="win32" name="{{ identifier }}" version="{{ version }}" processorArchitecture="{{ arch }}"/>
  <description>{{ name }}</description>
  <compatibility xmlns="urn:schemas-microsoft-com:compatibility.v1">
    <application>
      <supportedOS Id="{8e0f7a12-bfb3-4fe8-b9a5-48fd50a15a9a}"/>
    </application>
  </compatibility>
</assembly>
"""

_LAUNCHER = """\
#!/bin/sh
# {{ name }} {{ version }}
HERE="$(dirname "$(readlink -f "$0")")"
exec "$HERE/{{ executable }}" "$@"
"""

_DESKTOP_ENTRY = """\
[Desktop Entry]
Type=Application
Name={{ name }}
X-AppVersion={{ version }}
Exec={{ launcher }} %U
Icon={{ icon }}
Terminal=false
"""

_env = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)
_xml_env = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    autoescape=True,
)


def bundle_identifier(name: str) -> str:
    """Reverse-domain identifier for an application name."""
    return f"{IDENTIFIER_PREFIX}.{name.lower()}"


def numeric_version(version: str) -> str:
    """Reduce a version string to the four-part numeric form Windows expects."""
    parts = re.findall(r"\d+", version.split("-", 1)[0].split("+", 1)[0])[:4]
    parts += ["0"] * (4 - len(parts))
    return ".".join(str(int(p)) for p in parts)


def patch_plist(path: Path, manifest: Manifest) -> dict:
    """Brand an Info.plist in place, keeping its on-disk format."""
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        raise NotFoundError(f"metadata file not found: {path}") from None
    except OSError as exc:
        raise BundleIOError(f"cannot read {path}: {exc}") from exc

    fmt = plistlib.FMT_BINARY if data.startswith(b"bplist00") else plistlib.FMT_XML
    try:
        plist = plistlib.loads(data, fmt=fmt)
    except (plistlib.InvalidFileException, ExpatError, ValueError) as exc:
        raise ParseError(f"{path}: {exc}") from exc

    if not isinstance(plist, dict):
        raise ParseError(f"{path}: expected a dictionary at the top level")

    plist["CFBundleDisplayName"] = manifest.name
    plist["CFBundleName"] = manifest.name
    plist["CFBundleVersion"] = manifest.version
    plist["CFBundleShortVersionString"] = manifest.version
    plist["CFBundleIdentifier"] = bundle_identifier(manifest.name)

    try:
        path.write_bytes(plistlib.dumps(plist, fmt=fmt, sort_keys=True))
    except OSError as exc:
        raise BundleIOError(f"cannot write {path}: {exc}") from exc

    logger.debug("Patched %s (%s)", path, "binary" if fmt == plistlib.FMT_BINARY else "xml")
    return plist


def write_resource_manifest(path: Path, manifest: Manifest, arch: str) -> str:
    """Render the application resource manifest used by Windows."""
    text = _xml_env.from_string(_RESOURCE_MANIFEST).render(
        identifier=bundle_identifier(manifest.name),
        version=numeric_version(manifest.version),
        arch=_MANIFEST_ARCH.get(arch, "*"),
        name=manifest.name,
    )
    fsutil.write_text(path, text)
    logger.debug("Wrote resource manifest %s", path)
    return text


def write_launcher(
    script: Path,
    desktop: Path,
    manifest: Manifest,
    *,
    executable: str,
    icon: str,
) -> None:
    """Generate a launcher script and desktop entry for a Linux bundle."""
    values = {
        "name": manifest.name,
        "version": manifest.version,
        "launcher": script.name,
        "executable": executable,
        "icon": icon,
    }
    mode = stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH
    fsutil.write_text(script, _env.from_string(_LAUNCHER).render(values), mode=mode)
    fsutil.write_text(desktop, _env.from_string(_DESKTOP_ENTRY).render(values))
    logger.debug("Wrote launcher %s and %s", script, desktop)
