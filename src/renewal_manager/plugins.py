"""Plugin option variants for each stage of a renewal.

Every stage (target, validation, order, csr, store, installation) is a closed
family of frozen dataclasses. Fields that map to a command line argument
declare it in their metadata; ``describe()`` turns them into an ordered list
of ``(ArgumentMeta, value)`` pairs that the command line serializer consumes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

VAULT_PREFIX = "vault://json/"


def argument(name: str, *, secret: bool = False, default: Any = None, default_factory: Any = None) -> Any:
    """Declare a dataclass field as a command line argument."""
    metadata = {"argument": name, "secret": secret}
    if default_factory is not None:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


@dataclass(frozen=True)
class ArgumentMeta:
    name: str
    secret: bool = False


@dataclass(frozen=True)
class ProtectedString:
    """A secret value. Its ``repr`` never reveals the value."""

    value: str | None = field(default=None, repr=False)

    @property
    def is_vault_reference(self) -> bool:
        return bool(self.value) and self.value.startswith(VAULT_PREFIX)


@dataclass(frozen=True)
class PluginOptions:
    """Base for all plugin option variants."""

    stage: ClassVar[str] = ""
    name: ClassVar[str] = ""

    def canonical_name(self) -> str:
        return self.name.lower()

    def describe(self) -> list[tuple[ArgumentMeta, Any]]:
        """Argument/value pairs in declaration order."""
        result = []
        for f in fields(self):
            arg_name = f.metadata.get("argument")
            if arg_name is None:
                continue
            result.append((ArgumentMeta(arg_name, f.metadata.get("secret", False)), getattr(self, f.name)))
        return result


@dataclass(frozen=True)
class TargetOptions(PluginOptions):
    stage: ClassVar[str] = "target"


@dataclass(frozen=True)
class ValidationOptions(PluginOptions):
    stage: ClassVar[str] = "validation"


@dataclass(frozen=True)
class OrderOptions(PluginOptions):
    stage: ClassVar[str] = "order"


@dataclass(frozen=True)
class CsrOptions(PluginOptions):
    stage: ClassVar[str] = "csr"


@dataclass(frozen=True)
class StoreOptions(PluginOptions):
    stage: ClassVar[str] = "store"


@dataclass(frozen=True)
class InstallationOptions(PluginOptions):
    stage: ClassVar[str] = "installation"


# Target


@dataclass(frozen=True)
class ManualOptions(TargetOptions):
    name: ClassVar[str] = "Manual"

    common_name: str | None = argument("commonname")
    hosts: tuple[str, ...] = argument("host", default_factory=tuple)


@dataclass(frozen=True)
class IisOptions(TargetOptions):
    name: ClassVar[str] = "IIS"

    site_ids: tuple[int, ...] = argument("siteid", default_factory=tuple)
    hosts: tuple[str, ...] = argument("host", default_factory=tuple)
    common_name: str | None = argument("commonname")
    exclude_bindings: tuple[str, ...] = argument("excludebindings", default_factory=tuple)


# Validation


@dataclass(frozen=True)
class SelfHostingOptions(ValidationOptions):
    name: ClassVar[str] = "SelfHosting"

    port: int | None = argument("validationport")


@dataclass(frozen=True)
class FileSystemOptions(ValidationOptions):
    name: ClassVar[str] = "FileSystem"

    path: str | None = argument("webroot")
    copy_web_config: bool = argument("manualtargetisiis", default=False)


@dataclass(frozen=True)
class DigitalOceanOptions(ValidationOptions):
    name: ClassVar[str] = "DigitalOcean"

    api_token: ProtectedString | None = argument("digitaloceanapitoken", secret=True)


@dataclass(frozen=True)
class CloudflareOptions(ValidationOptions):
    name: ClassVar[str] = "Cloudflare"

    api_token: ProtectedString | None = argument("cloudflareapitoken", secret=True)


@dataclass(frozen=True)
class AzureOptions(ValidationOptions):
    name: ClassVar[str] = "Azure"

    subscription_id: str | None = argument("azuresubscriptionid")
    resource_group: str | None = argument("azureresourcegroupname")
    use_msi: bool = argument("azureusemsi", default=False)
    tenant_id: str | None = argument("azuretenantid")
    client_id: str | None = argument("azureclientid")
    secret: ProtectedString | None = argument("azuresecret", secret=True)


# Order


@dataclass(frozen=True)
class SingleOptions(OrderOptions):
    name: ClassVar[str] = "Single"


@dataclass(frozen=True)
class DomainOptions(OrderOptions):
    name: ClassVar[str] = "Domain"


@dataclass(frozen=True)
class HostOptions(OrderOptions):
    name: ClassVar[str] = "Host"


# CSR


@dataclass(frozen=True)
class RsaOptions(CsrOptions):
    name: ClassVar[str] = "RSA"

    reuse_key: bool = argument("reuse-privatekey", default=False)


@dataclass(frozen=True)
class EcOptions(CsrOptions):
    name: ClassVar[str] = "EC"

    reuse_key: bool = argument("reuse-privatekey", default=False)


# Store


@dataclass(frozen=True)
class CertificateStoreOptions(StoreOptions):
    name: ClassVar[str] = "CertificateStore"

    store_name: str | None = argument("certificatestore")
    keep_existing: bool = argument("keepexisting", default=False)


@dataclass(frozen=True)
class PemFilesOptions(StoreOptions):
    name: ClassVar[str] = "PemFiles"

    path: str | None = argument("pemfilespath")
    file_name: str | None = argument("pemfilesname")
    password: ProtectedString | None = argument("pemfilespassword", secret=True)


@dataclass(frozen=True)
class PfxFileOptions(StoreOptions):
    name: ClassVar[str] = "PfxFile"

    path: str | None = argument("pfxfilepath")
    file_name: str | None = argument("pfxfilename")
    password: ProtectedString | None = argument("pfxpassword", secret=True)


# Installation


@dataclass(frozen=True)
class NoInstallationOptions(InstallationOptions):
    name: ClassVar[str] = "None"


@dataclass(frozen=True)
class ScriptOptions(InstallationOptions):
    name: ClassVar[str] = "Script"

    script: str | None = argument("script")
    parameters: str | None = argument("scriptparameters")
