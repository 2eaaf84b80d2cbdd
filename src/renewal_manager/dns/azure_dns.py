"""Azure DNS provider: create/delete TXT records via azure-mgmt-dns."""

from __future__ import annotations

import logging

from azure.core.exceptions import ResourceNotFoundError
from azure.mgmt.dns import DnsManagementClient
from azure.mgmt.dns.models import RecordSet, TxtRecord

from renewal_manager.dns.base import DnsValidationProvider, DnsZone

logger = logging.getLogger(__name__)

# Record ids are "<record set name>/<value>"; neither part can contain a slash
_ID_SEPARATOR = "/"


class AzureDnsProvider(DnsValidationProvider):
    """DNS provider backed by Azure DNS zones in one resource group."""

    provider_name = "Azure"

    def __init__(
        self,
        credential,
        subscription_id: str,
        resource_group: str,
        _dns_client: DnsManagementClient | None = None,
    ) -> None:
        self._resource_group = resource_group
        self._dns_client = _dns_client or DnsManagementClient(credential, subscription_id)

    def _list_zones(self) -> dict[str, str]:
        return {zone.name: zone.name for zone in self._dns_client.zones.list_by_resource_group(self._resource_group)}

    def _txt_values(self, zone: DnsZone, record_name: str) -> tuple[int | None, list[list[str]]]:
        """TTL and values of the TXT record set, or no values when it does not exist."""
        try:
            existing = self._dns_client.record_sets.get(
                resource_group_name=self._resource_group,
                zone_name=zone.id,
                relative_record_set_name=record_name,
                record_type="TXT",
            )
        except ResourceNotFoundError:
            return None, []
        return existing.ttl, [list(txt.value) for txt in existing.txt_records or []]

    def _write_txt_values(self, zone: DnsZone, record_name: str, ttl: int, values: list[list[str]]) -> None:
        self._dns_client.record_sets.create_or_update(
            resource_group_name=self._resource_group,
            zone_name=zone.id,
            relative_record_set_name=record_name,
            record_type="TXT",
            parameters=RecordSet(ttl=ttl, txt_records=[TxtRecord(value=value) for value in values]),
        )

    def _create_txt_record(self, zone: DnsZone, record_name: str, value: str) -> str:
        # A record set holds every value published under one name, e.g. for
        # a domain and its wildcard. Add to it rather than replace it.
        _ttl, values = self._txt_values(zone, record_name)
        if [value] not in values:
            values.append([value])
        self._write_txt_values(zone, record_name, self.ttl, values)
        return f"{record_name}{_ID_SEPARATOR}{value}"

    def _delete_txt_record(self, zone: DnsZone, record_id: str) -> None:
        record_name, _sep, value = record_id.partition(_ID_SEPARATOR)
        ttl, values = self._txt_values(zone, record_name)
        if [value] not in values:
            logger.debug("TXT value for '%s' in zone %s already removed", record_name, zone.name)
            return
        remaining = [v for v in values if v != [value]]
        if remaining:
            self._write_txt_values(zone, record_name, ttl or self.ttl, remaining)
            return
        self._dns_client.record_sets.delete(
            resource_group_name=self._resource_group,
            zone_name=zone.id,
            relative_record_set_name=record_name,
            record_type="TXT",
        )

    def close(self) -> None:
        self._dns_client.close()
