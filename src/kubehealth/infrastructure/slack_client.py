"""Async Slack incoming-webhook client."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class SlackDeliveryError(RuntimeError):
    """Slack webhook delivery failed."""


@dataclass(frozen=True)
class SlackClientConfig:
    """Runtime tuning options for webhook calls."""

    timeout_seconds: float = 30.0
    max_retries: int = 2
    retry_base_delay_seconds: float = 0.3


class SlackWebhookClient:
    """Post Block Kit payloads to a Slack incoming webhook."""

    def __init__(
        self,
        webhook_url: str,
        config: SlackClientConfig | None = None,
    ) -> None:
        """Create webhook client.

        Parameters
        ----------
        webhook_url : str
            Incoming webhook URL.
        config : SlackClientConfig | None
            Runtime tuning options.
        """
        self.webhook_url = webhook_url
        self.config = config or SlackClientConfig()
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "SlackWebhookClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_seconds)
        return self._client

    async def _post_with_retries(self, payload: dict[str, Any]) -> httpx.Response:
        """Perform POST with retry/backoff on 5xx and transport errors.

        Parameters
        ----------
        payload : dict[str, Any]
            JSON body.

        Returns
        -------
        httpx.Response
            Final response object.
        """
        client = await self._ensure_client()
        last_exc: Exception | None = None
        for attempt in range(self.config.max_retries + 1):
            try:
                response = await client.post(self.webhook_url, json=payload)
                if response.status_code >= 500 and attempt < self.config.max_retries:
                    await asyncio.sleep(
                        self.config.retry_base_delay_seconds * (2**attempt)
                    )
                    continue
                return response
            except httpx.HTTPError as exc:
                last_exc = exc
                if attempt < self.config.max_retries:
                    await asyncio.sleep(
                        self.config.retry_base_delay_seconds * (2**attempt)
                    )
                    continue
                break
        raise SlackDeliveryError(
            f"Failed to send Slack request: {last_exc}"
        ) from last_exc

    async def send(self, payload: dict[str, Any]) -> None:
        """Deliver payload; raise `SlackDeliveryError` on a non-success status."""
        response = await self._post_with_retries(payload)
        if response.is_success:
            return
        body = response.text[:200]
        logger.error("Slack webhook failed: %s - %s", response.status_code, body)
        raise SlackDeliveryError(
            f"Slack webhook returned non-success status {response.status_code}"
        )
