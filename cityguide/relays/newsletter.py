"""
Newsletter subscription client.

Upserts a subscriber through the newsletter provider's v2 REST API,
reactivating existing subscribers and sending the welcome email.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.beehiiv.com/v2"


@dataclass
class SubscribeOutcome:
    """Result of one subscribe call."""

    success: bool
    status_code: int = 500
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None


class NewsletterClient:
    """Bearer-authenticated client for the subscriptions endpoint."""

    def __init__(
        self,
        api_key: str,
        publication_id: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the newsletter client.

        Args:
            api_key: Provider API key
            publication_id: Publication the subscriber is added to
            base_url: API root
            timeout: Request timeout in seconds
            client: Shared HTTP client; not closed by this client
        """
        if not api_key or not publication_id:
            raise ValueError("Newsletter client requires an API key and a publication id")
        self.api_key = api_key
        self.publication_id = publication_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def subscriptions_url(self) -> str:
        return f"{self.base_url}/publications/{self.publication_id}/subscriptions"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def subscribe(self, email: str) -> SubscribeOutcome:
        """
        Subscribe an email address.

        Returns:
            SubscribeOutcome; provider errors carry the provider's status code
        """
        body = {
            "email": email,
            "reactivate_existing": True,
            "send_welcome_email": True,
            "utm_source": "website",
            "utm_medium": "organic",
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            response = await self._get_client().post(
                self.subscriptions_url,
                json=body,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.error(f"Subscription request failed: {e!r}")
            return SubscribeOutcome(success=False, status_code=500, error="Internal server error")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"data": data}

        logger.info(f"Newsletter API response: {response.status_code}")

        if response.is_success:
            return SubscribeOutcome(success=True, status_code=response.status_code, data=data)

        logger.error(f"Newsletter API error: {data}")
        return SubscribeOutcome(
            success=False,
            status_code=response.status_code,
            data=data,
            error=data.get("message") or "Subscription failed",
        )

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
