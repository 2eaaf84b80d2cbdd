"""Configuration loading and validation from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

_LETS_ENCRYPT_DIRECTORY = "https://acme-v02.api.letsencrypt.org/directory"
_DEFAULT_PROGRAM_NAME = "renewal-manager"
_DEFAULT_PAGE_SIZE = 50
_DEFAULT_CACHE_REUSE_DAYS = 1


@dataclass(frozen=True)
class AppConfig:
    """Process-wide settings: plugin defaults, UI paging and ACME account."""

    program_name: str = _DEFAULT_PROGRAM_NAME
    default_validation: str = "selfhosting"
    default_order: str = "single"
    default_csr: str = "rsa"
    default_store: str = "certificatestore"
    default_installation: str = "none"
    page_size: int = _DEFAULT_PAGE_SIZE
    cache_reuse_days: int = _DEFAULT_CACHE_REUSE_DAYS
    acme_directory_url: str = _LETS_ENCRYPT_DIRECTORY
    acme_account_key: str | None = None
    acme_account_uri: str | None = None


def _int_env(name: str, default: int, minimum: int) -> int:
    raw = os.environ.get(name, str(default))
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got: {value}")
    return value


def _plugin_env(name: str, default: str) -> str:
    return (os.environ.get(name) or default).lower()


def load_config() -> AppConfig:
    """Load and validate application configuration from environment variables."""
    acme_account_key = os.environ.get("ACME_ACCOUNT_KEY") or None
    acme_account_uri = os.environ.get("ACME_ACCOUNT_URI") or None
    if bool(acme_account_key) != bool(acme_account_uri):
        raise ValueError("ACME_ACCOUNT_KEY and ACME_ACCOUNT_URI must both be set or both be unset")

    return AppConfig(
        program_name=os.environ.get("RENEWAL_PROGRAM_NAME") or _DEFAULT_PROGRAM_NAME,
        default_validation=_plugin_env("DEFAULT_VALIDATION", "selfhosting"),
        default_order=_plugin_env("DEFAULT_ORDER", "single"),
        default_csr=_plugin_env("DEFAULT_CSR", "rsa"),
        default_store=_plugin_env("DEFAULT_STORE", "certificatestore"),
        default_installation=_plugin_env("DEFAULT_INSTALLATION", "none"),
        page_size=_int_env("UI_PAGE_SIZE", _DEFAULT_PAGE_SIZE, minimum=2),
        cache_reuse_days=_int_env("CACHE_REUSE_DAYS", _DEFAULT_CACHE_REUSE_DAYS, minimum=0),
        acme_directory_url=os.environ.get("ACME_DIRECTORY_URL", _LETS_ENCRYPT_DIRECTORY),
        acme_account_key=acme_account_key,
        acme_account_uri=acme_account_uri,
    )
