"""Azure credential management for the Azure DNS provider."""

from __future__ import annotations

from azure.core.credentials import TokenCredential
from azure.identity import ClientSecretCredential, DefaultAzureCredential

_credential: DefaultAzureCredential | None = None


def get_credential(
    tenant_id: str | None = None,
    client_id: str | None = None,
    client_secret: str | None = None,
) -> TokenCredential:
    """Return a credential for the given service principal.

    Without a service principal the process identity is used through a
    cached DefaultAzureCredential instance.
    """
    global _credential
    if tenant_id or client_id or client_secret:
        if not (tenant_id and client_id and client_secret):
            raise ValueError("Azure tenant id, client id and secret must all be set for service principal login")
        return ClientSecretCredential(tenant_id=tenant_id, client_id=client_id, client_secret=client_secret)
    if _credential is None:
        _credential = DefaultAzureCredential()
    return _credential
