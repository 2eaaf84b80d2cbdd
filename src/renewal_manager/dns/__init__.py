"""DNS provider factory: resolve validation options to a concrete provider."""

from __future__ import annotations

from renewal_manager.auth import get_credential as _get_credential
from renewal_manager.dns.azure_dns import AzureDnsProvider
from renewal_manager.dns.base import ChallengeSession, DnsValidationProvider, DnsZone
from renewal_manager.dns.cloudflare import CloudflareDnsProvider
from renewal_manager.dns.digitalocean import DigitalOceanDnsProvider
from renewal_manager.plugins import (
    AzureOptions,
    CloudflareOptions,
    DigitalOceanOptions,
    ProtectedString,
    ValidationOptions,
)

__all__ = [
    "ChallengeSession",
    "DnsValidationProvider",
    "DnsZone",
    "get_dns_provider",
]


def _secret(value: ProtectedString | None) -> str | None:
    return value.value if value is not None else None


def get_dns_provider(options: ValidationOptions) -> DnsValidationProvider:
    """Instantiate the DNS provider configured by a renewal's validation options.

    A new provider is created for every renewal execution and must not be
    shared between renewals.

    Raises:
        ValueError: When the options do not describe a DNS provider or lack credentials.
    """
    if isinstance(options, DigitalOceanOptions):
        token = _secret(options.api_token)
        if not token:
            raise ValueError("An API token is required for DigitalOcean validation")
        return DigitalOceanDnsProvider(api_token=token)

    if isinstance(options, CloudflareOptions):
        token = _secret(options.api_token)
        if not token:
            raise ValueError("An API token is required for Cloudflare validation")
        return CloudflareDnsProvider(api_token=token)

    if isinstance(options, AzureOptions):
        if not options.subscription_id:
            raise ValueError("A subscription id is required for Azure validation")
        if not options.resource_group:
            raise ValueError("A resource group is required for Azure validation")
        if options.use_msi:
            credential = _get_credential()
        else:
            credential = _get_credential(
                tenant_id=options.tenant_id,
                client_id=options.client_id,
                client_secret=_secret(options.secret),
            )
        return AzureDnsProvider(
            credential=credential,
            subscription_id=options.subscription_id,
            resource_group=options.resource_group,
        )

    raise ValueError(f"Unknown DNS provider: '{options.canonical_name()}'")
