"""Cloudflare DNS provider: create/delete TXT records via Cloudflare REST API."""

from __future__ import annotations

import logging

import httpx

from renewal_manager.dns.base import DnsValidationProvider, DnsZone
from renewal_manager.dns.zones import APEX

logger = logging.getLogger(__name__)

_API_BASE = "https://api.cloudflare.com/client/v4"
_PAGE_SIZE = 50


class CloudflareDnsProvider(DnsValidationProvider):
    """DNS provider backed by the Cloudflare API."""

    provider_name = "Cloudflare"
    min_ttl = 60

    def __init__(
        self,
        api_token: str,
        _http_client: httpx.Client | None = None,
    ) -> None:
        self._client = _http_client or httpx.Client(
            headers={"Authorization": f"Bearer {api_token}"},
            timeout=30,
        )

    def _list_zones(self) -> dict[str, str]:
        """Map zone names to Cloudflare zone ids, following pagination."""
        zones: dict[str, str] = {}
        page = 1
        while True:
            resp = self._client.get(f"{_API_BASE}/zones", params={"page": page, "per_page": _PAGE_SIZE})
            resp.raise_for_status()
            body = resp.json()
            for zone in body["result"]:
                zones[zone["name"]] = zone["id"]
            total_pages = body.get("result_info", {}).get("total_pages", 1)
            if page >= total_pages:
                logger.debug("Cloudflare account manages %d zone(s)", len(zones))
                return zones
            page += 1

    def _create_txt_record(self, zone: DnsZone, record_name: str, value: str) -> str:
        fqdn = zone.name if record_name == APEX else f"{record_name}.{zone.name}"
        resp = self._client.post(
            f"{_API_BASE}/zones/{zone.id}/dns_records",
            json={"type": "TXT", "name": fqdn, "content": value, "ttl": self.ttl},
        )
        resp.raise_for_status()
        return resp.json()["result"]["id"]

    def _delete_txt_record(self, zone: DnsZone, record_id: str) -> None:
        self._client.delete(
            f"{_API_BASE}/zones/{zone.id}/dns_records/{record_id}",
        ).raise_for_status()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
