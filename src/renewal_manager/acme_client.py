"""ACME protocol operations needed by the renewal manager: certificate revocation."""

from __future__ import annotations

import json
import logging

import josepy
from acme import messages
from acme.client import ClientNetwork, ClientV2
from cryptography import x509

from renewal_manager.config import AppConfig
from renewal_manager.models import RenewalRecord
from renewal_manager.services import CacheService, CertificateService

logger = logging.getLogger(__name__)

_USER_AGENT = "acme-renewal-manager"
# RFC 5280 CRLReason "unspecified"
_REASON_UNSPECIFIED = 0


def _deserialize_key(key_json: str) -> josepy.JWKRSA:
    """Deserialize a JWK RSA key from a JSON string."""
    return josepy.JWKRSA.from_json(json.loads(key_json))


def _build_client(
    directory_url: str,
    account_key: josepy.JWKRSA,
    account_uri: str,
) -> ClientV2:
    """Construct a ClientV2 instance bound to an existing account."""
    net = ClientNetwork(account_key, user_agent=_USER_AGENT)
    directory = ClientV2.get_directory(directory_url, net)
    client = ClientV2(directory, net=net)
    net.account = messages.RegistrationResource(uri=account_uri, body=messages.Registration())
    return client


class AcmeCertificateService(CertificateService):
    """Revokes cached certificates with the configured ACME account."""

    def __init__(
        self,
        config: AppConfig,
        cache: CacheService,
        _client: ClientV2 | None = None,
    ) -> None:
        self._config = config
        self._cache = cache
        self._client = _client

    def _get_client(self) -> ClientV2:
        if self._client is None:
            if not (self._config.acme_account_key and self._config.acme_account_uri):
                raise ValueError("ACME_ACCOUNT_KEY and ACME_ACCOUNT_URI are required to revoke certificates")
            self._client = _build_client(
                self._config.acme_directory_url,
                _deserialize_key(self._config.acme_account_key),
                self._config.acme_account_uri,
            )
        return self._client

    def revoke_certificate(self, renewal: RenewalRecord) -> None:
        """Revoke the most recently issued certificate of ``renewal``.

        Raises:
            ValueError: When no certificate is cached or no ACME account is configured.
        """
        pem = self._cache.cached_certificate(renewal)
        if not pem:
            raise ValueError(f"No cached certificate found for renewal '{renewal.id}'")
        cert = x509.load_pem_x509_certificate(pem)
        self._get_client().revoke(cert, _REASON_UNSPECIFIED)
        logger.info("Revoked certificate %x for renewal %s", cert.serial_number, renewal)
