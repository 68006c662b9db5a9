"""The packaging stages, in the order the build pipeline runs them."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path, PurePosixPath

from . import fsutil, metadata
from .codec import inject_codec
from .context import BuildContext
from .errors import BundleIOError, DownloadError, ExternalProcessError
from .manifest import load_manifest
from .resolve import Resolver
from .stage import Stage, stage

logger = logging.getLogger(__name__)

DEPENDENCY_CACHE_DIRS = frozenset({"node_modules"})


def _build_name(ctx: BuildContext) -> str:
    manifest = ctx.require_manifest()
    template = ctx.options.output_name
    if not template:
        return f"{manifest.name}-{ctx.target.build_name}"

    return str(Resolver.for_build(ctx).resolve(template))


def _excluded_subpath(root: Path, path: Path) -> PurePosixPath | None:
    """Return ``path`` relative to ``root`` (with a leading slash) if inside it."""
    root, path = root.resolve(), path.resolve()
    if path.is_relative_to(root):
        return PurePosixPath("/") / path.relative_to(root).as_posix()
    return None


@stage("load-manifest")
class LoadManifest(Stage):
    """Read package.json and work out where the build goes."""

    readonly = True

    def run(self, ctx: BuildContext) -> None:
        ctx.manifest = load_manifest(ctx.source)
        ctx.build_name = _build_name(ctx)

        parent = ctx.options.output_dir if ctx.options.output_dir else ctx.source.parent
        ctx.build_dir = (Path(parent) / ctx.build_name).resolve()
        logger.debug("Build directory: %s", ctx.build_dir)

        # the build dir is emptied next, so it must not contain the source
        if ctx.source.resolve().is_relative_to(ctx.build_dir):
            raise BundleIOError(f"build directory {ctx.build_dir} would overwrite the source {ctx.source}")


@stage("reset-build-dir")
class ResetBuildDir(Stage):
    def run(self, ctx: BuildContext) -> None:
        fsutil.empty_dir(ctx.require_build_dir())


@stage("copy-runtime")
class CopyRuntime(Stage):
    """Copy the runtime distribution, leaving out bundled locales."""

    def run(self, ctx: BuildContext) -> None:
        pattern = ctx.profile.locale_pattern
        exclude = (lambda rel: pattern.search(rel) is not None) if pattern else None
        fsutil.copy_tree(ctx.runtime_dir, ctx.require_build_dir(), exclude=exclude)


@stage("inject-codec")
class InjectCodec(Stage):
    def enabled(self, ctx: BuildContext) -> bool:
        return ctx.options.with_ffmpeg

    def run(self, ctx: BuildContext) -> None:
        if ctx.codec_provider is None:
            raise DownloadError("codec inclusion requested but no codec provider is configured")
        ctx.codec_path = inject_codec(
            ctx.require_build_dir(),
            ctx.profile,
            ctx.codec_provider,
            version=ctx.version,
            target=ctx.target,
            policy=ctx.options.codec_policy,
        )


@stage("embed-application")
class EmbedApplication(Stage):
    """Copy the application into the bundle, installing dependencies in production."""

    def run(self, ctx: BuildContext) -> None:
        app_dir = ctx.app_dir
        nested = _excluded_subpath(ctx.source, ctx.require_build_dir())
        production = ctx.options.production

        def exclude(rel: str) -> bool:
            if nested is not None and PurePosixPath(rel) == nested:
                return True
            return production and not DEPENDENCY_CACHE_DIRS.isdisjoint(PurePosixPath(rel).parts)

        fsutil.copy_tree(ctx.source, app_dir, exclude=exclude)

        if production:
            self.install(ctx.options.install_command, app_dir)
            ctx.installed = True

    @staticmethod
    def install(command: list[str], cwd: Path) -> None:
        logger.info("Executing '%s' at %s", " ".join(command), cwd)
        try:
            proc = subprocess.run(command, cwd=cwd, capture_output=True, text=True, check=False)
        except OSError as exc:
            raise ExternalProcessError(f"cannot execute '{command[0]}': {exc}") from exc

        if proc.stderr:
            logger.debug("%s", proc.stderr.rstrip())
        if proc.returncode != 0:
            raise ExternalProcessError(
                f"'{' '.join(command)}' exited with status {proc.returncode}",
                returncode=proc.returncode,
                stderr=proc.stderr,
            )


@stage("patch-metadata")
class PatchMetadata(Stage):
    """Write the application's name, version and identifier into the bundle."""

    def run(self, ctx: BuildContext) -> None:
        manifest = ctx.require_manifest()
        build_dir = ctx.require_build_dir()
        profile = ctx.profile

        if profile.metadata_format == "plist":
            metadata.patch_plist(build_dir / profile.metadata_file, manifest)
        elif profile.metadata_format == "manifest":
            metadata.write_resource_manifest(
                build_dir / profile.metadata_file,
                manifest,
                ctx.target.arch_id,
            )
        elif profile.metadata_format == "launcher":
            launcher = ctx.options.executable_name or manifest.name
            if build_dir / launcher == build_dir / profile.executable:
                raise BundleIOError(f"launcher name '{launcher}' would replace the runtime executable")
            metadata.write_launcher(
                build_dir / launcher,
                build_dir / profile.metadata_file.format(launcher=launcher),
                manifest,
                executable=profile.executable,
                icon=profile.icon_slot,
            )
        else:
            raise ValueError(f"unknown metadata format: '{profile.metadata_format}'")


@stage("replace-icon")
class ReplaceIcon(Stage):
    def enabled(self, ctx: BuildContext) -> bool:
        return self.icon(ctx) is not None

    @staticmethod
    def icon(ctx: BuildContext) -> Path | None:
        return getattr(ctx.options, ctx.profile.icon_option, None)

    def run(self, ctx: BuildContext) -> None:
        icon = self.icon(ctx)
        if icon is not None:
            fsutil.copy_file(Path(icon), ctx.require_build_dir() / ctx.profile.icon_slot)


@stage("rename-bundle")
class RenameBundle(Stage):
    """Give the bundle directory the application's name."""

    def run(self, ctx: BuildContext) -> None:
        manifest = ctx.require_manifest()
        build_dir = ctx.require_build_dir()
        profile = ctx.profile

        new_path = build_dir / f"{manifest.name}.{profile.bundle_extension}"
        logger.debug("Renaming %s to %s", profile.bundle_root, new_path.name)
        fsutil.rename(build_dir / str(profile.bundle_root), new_path)
        ctx.bundle_path = new_path
