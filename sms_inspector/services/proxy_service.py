"""
sms_inspector/services/proxy_service.py

Purpose: Outbound HTTP proxy support

- Validates proxy settings from the admin panel
- Builds proxy URLs (with optional credentials)
- Tests a proxy by fetching an IP echo service through it
- Provides the transport used by every outbound Premiumy call
"""

from typing import Callable, Optional
from urllib.parse import quote

import httpx

from sms_inspector.core.config import settings
from sms_inspector.core.exceptions import ProxyTestError, ValidationError
from sms_inspector.core.logging import get_logger
from sms_inspector.schemas.admin import ProxySettings
from sms_inspector.utils.validation_utils import validate_port, validate_proxy_host

logger = get_logger(__name__)

TransportFactory = Callable[[Optional[str]], httpx.AsyncBaseTransport]


def default_transport_factory(proxy_url: Optional[str]) -> httpx.AsyncBaseTransport:
    """Real network transport, routed through `proxy_url` when given."""
    return httpx.AsyncHTTPTransport(proxy=proxy_url)


def validate_proxy(proxy: ProxySettings) -> None:
    """
    Raises:
        ValidationError: If the host or port is unusable
    """
    if not validate_proxy_host(proxy.ip):
        raise ValidationError("Proxy IP address is invalid.")
    if not validate_port(proxy.port):
        raise ValidationError("Proxy port must be between 1 and 65535.")


def build_proxy_url(proxy: ProxySettings) -> str:
    """
    Builds ``http://[user[:password]@]host:port``.
    Credentials are percent-encoded so `@` and `:` survive.
    """
    auth = ""
    if proxy.username:
        auth = quote(proxy.username, safe="")
        if proxy.password:
            auth += ":" + quote(proxy.password, safe="")
        auth += "@"
    return f"http://{auth}{proxy.ip}:{proxy.port}"


def mask_proxy_url(proxy: ProxySettings) -> str:
    """Proxy address safe to log."""
    user = f"{proxy.username}:***@" if proxy.username else ""
    return f"http://{user}{proxy.ip}:{proxy.port}"


class ProxyService:
    """
    Tests proxies before they are saved.
    """

    def __init__(self, transport_factory: Optional[TransportFactory] = None):
        self._transport_factory = transport_factory or default_transport_factory
        self._timeout = settings.PROXY_TEST_TIMEOUT

    def transport_for(self, proxy: Optional[ProxySettings]) -> httpx.AsyncBaseTransport:
        proxy_url = build_proxy_url(proxy) if proxy and not proxy.is_blank else None
        return self._transport_factory(proxy_url)

    async def test_proxy(self, proxy: ProxySettings) -> Optional[str]:
        """
        Fetches the IP echo service through the proxy.

        Args:
            proxy: Proxy to test

        Returns:
            The exit IP reported by the echo service, or None if it did not say

        Raises:
            ValidationError: If the settings are malformed
            ProxyTestError: If the request fails or answers with a non-2xx status
        """
        validate_proxy(proxy)
        masked = mask_proxy_url(proxy)
        logger.info(f"Testing proxy {masked}")

        try:
            async with httpx.AsyncClient(
                transport=self.transport_for(proxy),
                timeout=self._timeout,
                follow_redirects=True,
            ) as client:
                response = await client.get(settings.PROXY_TEST_URL)
        except httpx.TimeoutException:
            logger.warning(f"Proxy test timed out: {masked}")
            raise ProxyTestError("Proxy test failed: the proxy did not respond in time.")
        except httpx.HTTPError as e:
            logger.warning(f"Proxy test failed for {masked}: {e}")
            raise ProxyTestError(f"Proxy test failed: {e}")

        if not response.is_success:
            logger.warning(f"Proxy test got HTTP {response.status_code} via {masked}")
            raise ProxyTestError(
                f"Proxy test failed: HTTP {response.status_code} {response.reason_phrase}"
            )

        exit_ip = _extract_ip(response)
        logger.info(f"Proxy test passed for {masked} (exit IP: {exit_ip or 'unknown'})")
        return exit_ip


def _extract_ip(response: httpx.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        text = response.text.strip()
        return text if text and len(text) <= 64 and " " not in text else None
    if isinstance(data, dict):
        ip = data.get("ip") or data.get("origin")
        return str(ip) if ip else None
    return None


# Global proxy service instance
_proxy_service: Optional[ProxyService] = None


def get_proxy_service() -> ProxyService:
    """Get or create the global proxy service instance."""
    global _proxy_service
    if _proxy_service is None:
        _proxy_service = ProxyService()
    return _proxy_service
