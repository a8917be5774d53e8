"""
Mail Relay Client

HTTP client for the transactional email relay.
"""

import logging
from typing import Any, Optional

import httpx

from ..errors import MailDeliveryError

logger = logging.getLogger(__name__)


class MailClient:
    """
    Client for a JSON mail-relay API.

    Messages are posted as {to, from, subject, html} with a bearer API key.
    """

    def __init__(
        self,
        relay_url: str,
        api_key: str,
        sender: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize mail client.

        Args:
            relay_url: Endpoint that accepts message POSTs
            api_key: Bearer key for the relay
            sender: From address
            timeout: Request timeout in seconds
            transport: Optional transport override, used by tests
        """
        self.relay_url = relay_url
        self.sender = sender
        self._http_client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def send(self, to: str, subject: str, html: str) -> dict[str, Any]:
        """
        Send one message through the relay.

        Raises:
            MailDeliveryError: the relay answered with an error status
            httpx.HTTPError: the relay could not be reached
        """
        response = await self._http_client.post(
            self.relay_url,
            json={"to": to, "from": self.sender, "subject": subject, "html": html},
        )

        if response.status_code >= 400:
            logger.error(f"Mail relay failed: {response.status_code} - {response.text}")
            raise MailDeliveryError(response.status_code, response.text)

        logger.debug(f"Mail relay accepted message to {to}")
        try:
            return response.json()
        except ValueError:
            return {}
