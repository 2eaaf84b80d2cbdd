"""Tests for DigitalOcean DNS provider."""

from unittest.mock import MagicMock, patch

import httpx

from renewal_manager.dns.digitalocean import DigitalOceanDnsProvider
from renewal_manager.models import DnsAuthority, DnsValidationRecord

_BASE = "https://api.digitalocean.com/v2"


def _response(body):
    return MagicMock(
        status_code=200,
        json=MagicMock(return_value=body),
        raise_for_status=MagicMock(),
    )


def _domains(*names, next_url=None):
    body = {"domains": [{"name": name, "ttl": 1800} for name in names], "links": {}}
    if next_url:
        body["links"] = {"pages": {"next": next_url}}
    return _response(body)


def _record(domain, value="token"):
    return DnsValidationRecord(authority=DnsAuthority(domain), value=value)


class TestDigitalOceanListZones:
    def test_lists_domains(self):
        mock_client = MagicMock()
        mock_client.get.return_value = _domains("example.com", "example.org")
        provider = DigitalOceanDnsProvider(api_token="tok", _http_client=mock_client)

        assert provider._list_zones() == {"example.com": "example.com", "example.org": "example.org"}
        mock_client.get.assert_called_once_with(f"{_BASE}/domains", params={"per_page": 200})

    def test_follows_next_link(self):
        mock_client = MagicMock()
        next_url = f"{_BASE}/domains?page=2&per_page=200"
        mock_client.get.side_effect = [_domains("a.com", next_url=next_url), _domains("b.com")]
        provider = DigitalOceanDnsProvider(api_token="tok", _http_client=mock_client)

        assert list(provider._list_zones()) == ["a.com", "b.com"]
        mock_client.get.assert_called_with(next_url, params=None)


class TestDigitalOceanCreateRecord:
    def test_creates_relative_record_in_longest_zone(self):
        mock_client = MagicMock()
        mock_client.get.return_value = _domains("example.com", "sub.example.com")
        mock_client.post.return_value = _response({"domain_record": {"id": 3352896, "type": "TXT"}})
        provider = DigitalOceanDnsProvider(api_token="tok", _http_client=mock_client)

        session = provider.create_record(_record("_acme-challenge.a.sub.example.com", "proof"))

        mock_client.post.assert_called_once_with(
            f"{_BASE}/domains/sub.example.com/records",
            json={"type": "TXT", "name": "_acme-challenge.a", "data": "proof", "ttl": 300},
        )
        assert session.record_id == "3352896"
        assert session.zone.name == "sub.example.com"

    def test_apex_record_is_named_at(self):
        mock_client = MagicMock()
        mock_client.get.return_value = _domains("example.com")
        mock_client.post.return_value = _response({"domain_record": {"id": 1}})
        provider = DigitalOceanDnsProvider(api_token="tok", _http_client=mock_client)

        provider.create_record(_record("example.com"))

        assert mock_client.post.call_args.kwargs["json"]["name"] == "@"

    def test_missing_zone_fails_without_post(self):
        mock_client = MagicMock()
        mock_client.get.return_value = _domains("notexample.com")
        provider = DigitalOceanDnsProvider(api_token="tok", _http_client=mock_client)

        session = provider.create_record(_record("_acme-challenge.example.com"))

        assert not session
        mock_client.post.assert_not_called()

    def test_transport_error_fails(self):
        mock_client = MagicMock()
        mock_client.get.side_effect = httpx.ConnectError("connection refused")
        provider = DigitalOceanDnsProvider(api_token="tok", _http_client=mock_client)

        assert not provider.create_record(_record("_acme-challenge.example.com"))


class TestDigitalOceanDeleteRecord:
    def test_deletes_created_record(self):
        mock_client = MagicMock()
        mock_client.get.return_value = _domains("example.com")
        mock_client.post.return_value = _response({"domain_record": {"id": 42}})
        provider = DigitalOceanDnsProvider(api_token="tok", _http_client=mock_client)
        session = provider.create_record(_record("_acme-challenge.example.com"))

        provider.delete_record(session)

        mock_client.delete.assert_called_once_with(f"{_BASE}/domains/example.com/records/42")

    def test_never_deletes_when_create_failed(self):
        mock_client = MagicMock()
        mock_client.get.return_value = _domains("example.org")
        provider = DigitalOceanDnsProvider(api_token="tok", _http_client=mock_client)
        session = provider.create_record(_record("_acme-challenge.example.com"))

        provider.delete_record(session)

        mock_client.delete.assert_not_called()

    def test_delete_failure_is_swallowed(self):
        mock_client = MagicMock()
        mock_client.get.return_value = _domains("example.com")
        mock_client.post.return_value = _response({"domain_record": {"id": 42}})
        mock_client.delete.return_value.raise_for_status.side_effect = httpx.HTTPStatusError(
            "404 Not Found", request=MagicMock(), response=MagicMock()
        )
        provider = DigitalOceanDnsProvider(api_token="tok", _http_client=mock_client)
        session = provider.create_record(_record("_acme-challenge.example.com"))

        provider.delete_record(session)

        mock_client.delete.assert_called_once()


class TestDigitalOceanClient:
    def test_client_uses_bearer_token(self):
        with patch("renewal_manager.dns.digitalocean.httpx.Client") as mock_cls:
            DigitalOceanDnsProvider(api_token="do-token")
            assert mock_cls.call_args.kwargs["headers"]["Authorization"] == "Bearer do-token"

    def test_close_closes_http_client(self):
        mock_client = MagicMock()
        with DigitalOceanDnsProvider(api_token="tok", _http_client=mock_client):
            pass

        mock_client.close.assert_called_once()
