"""DigitalOcean DNS provider: create/delete TXT records via the DigitalOcean REST API."""

from __future__ import annotations

import logging

import httpx

from renewal_manager.dns.base import DnsValidationProvider, DnsZone

logger = logging.getLogger(__name__)

_API_BASE = "https://api.digitalocean.com/v2"
_PAGE_SIZE = 200


class DigitalOceanDnsProvider(DnsValidationProvider):
    """DNS provider backed by DigitalOcean domains."""

    provider_name = "DigitalOcean"
    min_ttl = 30

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
        zones: dict[str, str] = {}
        url: str | None = f"{_API_BASE}/domains"
        params: dict | None = {"per_page": _PAGE_SIZE}
        while url:
            resp = self._client.get(url, params=params)
            resp.raise_for_status()
            body = resp.json()
            for domain in body.get("domains", []):
                zones[domain["name"]] = domain["name"]
            # The "next" link already carries the paging query string
            url = body.get("links", {}).get("pages", {}).get("next")
            params = None
        logger.debug("DigitalOcean account manages %d domain(s)", len(zones))
        return zones

    def _create_txt_record(self, zone: DnsZone, record_name: str, value: str) -> str:
        resp = self._client.post(
            f"{_API_BASE}/domains/{zone.id}/records",
            json={"type": "TXT", "name": record_name, "data": value, "ttl": self.ttl},
        )
        resp.raise_for_status()
        return str(resp.json()["domain_record"]["id"])

    def _delete_txt_record(self, zone: DnsZone, record_id: str) -> None:
        self._client.delete(f"{_API_BASE}/domains/{zone.id}/records/{record_id}").raise_for_status()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()
