"""Resolver: ${...} interpolation for config values and naming overrides."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .context import BuildContext

_INTERP_PATTERN = re.compile(r"\$\$\{|(\$\{([^{}]+)\})")


class Resolver:
    """Resolve ${...} interpolation references against a context dict."""

    def __init__(self, context: dict[str, Any] | None = None) -> None:
        self._context = context or {}

    @classmethod
    def for_build(cls, ctx: BuildContext) -> Resolver:
        """Create a resolver over the naming variables of a pipeline run.

        Exposes ``name`` and ``version`` from the manifest, ``runtime`` (the
        NW.js version being bundled), and ``target`` (e.g. 'osx-x64'),
        ``platform`` and ``arch`` for the target being packaged.
        """
        manifest = ctx.require_manifest()
        return cls(
            {
                "name": manifest.name,
                "version": manifest.version,
                "runtime": ctx.version,
                "target": ctx.target.build_name,
                "platform": ctx.target.platform,
                "arch": ctx.target.arch,
            }
        )

    def _resolve_ref(self, ref: str) -> Any:
        """Resolve a dotted reference (e.g., 'env.HOME') against the context."""
        parts = ref.split(".")
        current: Any = self._context

        for part in parts:
            try:
                current = current[part]
            except (KeyError, TypeError):
                try:
                    current = getattr(current, part)
                except AttributeError:
                    raise ValueError(f"undefined variable '{ref}'") from None

        if callable(current) and not isinstance(current, type):
            current = current()

        return current

    def _resolve_value(self, value: str) -> str | Any:
        """Resolve ${...} interpolations in a single string value.

        A string that is exactly one ${ref} resolves to the referenced object
        itself; embedded references are stringified. $${...} is a literal.
        """
        if "${" not in value:
            return value

        match = re.fullmatch(r"\$\{([^{}]+)\}", value)
        if match:
            return self._resolve_ref(match.group(1).strip())

        def _replace(m: re.Match) -> str:  # type: ignore[type-arg]
            if m.group(0) == "$${":
                return "${"
            return str(self._resolve_ref(m.group(2).strip()))

        return _INTERP_PATTERN.sub(_replace, value)

    def resolve(self, data: Any) -> Any:
        """Recursively resolve all ${...} interpolations in a value."""
        return self._walk(data)

    def _walk(self, obj: Any) -> Any:
        if isinstance(obj, dict):
            return {k: self._walk(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [self._walk(item) for item in obj]
        if isinstance(obj, str):
            return self._resolve_value(obj)
        return obj
