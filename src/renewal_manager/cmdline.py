"""Rebuild the command line that recreates a renewal.

The output format is user facing: people copy it to recreate renewals, so
argument order and escaping must stay stable.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from renewal_manager.config import AppConfig
from renewal_manager.models import RenewalRecord
from renewal_manager.plugins import PluginOptions, ProtectedString

MASK = "*******"


def escape(value: str) -> str:
    """Quote a value that contains whitespace or double quotes."""
    if any(ch.isspace() for ch in value) or '"' in value:
        return '"' + value.replace('"', '\\"') + '"'
    return value


def render_value(value: Any, secret: bool = False) -> str | None:
    """Render one argument value, ``None`` meaning a bare flag."""
    if isinstance(value, ProtectedString):
        return value.value if value.is_vault_reference else MASK
    if value is True:
        return None
    if isinstance(value, str):
        return MASK if secret else escape(value)
    if isinstance(value, (list, tuple)):
        if all(isinstance(item, int) and not isinstance(item, bool) for item in value):
            return ",".join(str(item) for item in value)
        return escape(",".join(str(item) for item in value))
    return str(value)


def _omitted(value: Any) -> bool:
    return value is None or value is False or (isinstance(value, (list, tuple)) and not value)


class CommandLineSerializer:
    """Turns a renewal's plugin options into a reproducible invocation.

    Arguments are collected in stage order and the first stage to claim an
    argument name keeps it. Plugin names equal to the configured defaults
    are left out.
    """

    def __init__(self, config: AppConfig) -> None:
        self._config = config

    @staticmethod
    def _add_arguments(args: dict[str, str | None], options: PluginOptions) -> None:
        for meta, value in options.describe():
            if meta.name in args or _omitted(value):
                continue
            args[meta.name] = render_value(value, meta.secret)

    @staticmethod
    def _add_name(args: dict[str, str | None], key: str, name: str, default: str) -> None:
        if name.lower() != default.lower() and key not in args:
            args[key] = name

    def _add_stages(self, args: dict[str, str | None], key: str, stages: Sequence[PluginOptions], default: str) -> None:
        # An empty list means the process default is used
        if not stages:
            return
        self._add_name(args, key, ",".join(o.canonical_name() for o in stages), default)
        for options in stages:
            self._add_arguments(args, options)

    def serialize(self, renewal: RenewalRecord) -> str:
        config = self._config
        args: dict[str, str | None] = {"source": renewal.target.canonical_name()}
        self._add_arguments(args, renewal.target)

        self._add_name(args, "validation", renewal.validation.canonical_name(), config.default_validation)
        self._add_arguments(args, renewal.validation)

        if renewal.order is not None:
            self._add_name(args, "order", renewal.order.canonical_name(), config.default_order)
            self._add_arguments(args, renewal.order)

        if renewal.csr is not None:
            self._add_name(args, "csr", renewal.csr.canonical_name(), config.default_csr)
            self._add_arguments(args, renewal.csr)

        self._add_stages(args, "store", renewal.store, config.default_store)
        self._add_stages(args, "installation", renewal.installation, config.default_installation)

        parts = [config.program_name]
        for name, value in args.items():
            # Empty values leave a bare flag, like None
            parts.append(f"--{name.lower()} {value or ''}".strip())
        return " ".join(parts)
