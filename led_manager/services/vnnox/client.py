"""
VNNOX Device API Client

Async client for the VNNOX terminal API.

Every request is signed with the account's access key/secret:
- X-Access-Key: the access key
- X-Timestamp: ISO-8601 UTC timestamp
- X-Nonce: 16 random bytes, hex encoded
- X-Signature: base64(HMAC-SHA256(secret, "METHOD\\nPATH\\nTIMESTAMP\\nNONCE"))

Optimized for polling many terminals:
- Reuses single HTTP client (no connection overhead per request)
- Bounded request timeout (30s default)
"""

import base64
import hashlib
import hmac
import secrets
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError

from led_manager.common.config import Settings
from led_manager.common.exceptions import RemoteUnavailableError
from led_manager.common.logging_setup import get_service_logger

from .responses import (
    CommandResponse,
    PlayingResponse,
    StatusResponse,
    VnnoxResponse,
)

logger = get_service_logger("vnnox")

API_PREFIX = "/api/v1/terminals"


class VnnoxClient:
    """Signed async client for the VNNOX terminal endpoints"""

    def __init__(
        self,
        access_key: str,
        access_secret: str,
        api_url: str = "https://api.vnnox.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.access_key = access_key
        self.access_secret = access_secret
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "VnnoxClient":
        settings.require_vnnox()
        return cls(
            access_key=settings.vnnox_ak,
            access_secret=settings.vnnox_as,
            api_url=settings.vnnox_api_url,
            timeout=settings.request_timeout_s,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create reusable HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def sign(self, method: str, path: str, timestamp: str, nonce: str) -> str:
        string_to_sign = f"{method}\n{path}\n{timestamp}\n{nonce}"
        digest = hmac.new(
            self.access_secret.encode("utf-8"),
            string_to_sign.encode("utf-8"),
            hashlib.sha256,
        ).digest()
        return base64.b64encode(digest).decode("ascii")

    def _auth_headers(self, method: str, path: str) -> dict[str, str]:
        timestamp = datetime.now(timezone.utc).isoformat()
        nonce = secrets.token_hex(16)
        return {
            "X-Access-Key": self.access_key,
            "X-Signature": self.sign(method, path, timestamp, nonce),
            "X-Timestamp": timestamp,
            "X-Nonce": nonce,
        }

    async def _request(
        self,
        method: str,
        terminal_id: str,
        suffix: str,
        response_model: type[VnnoxResponse],
        json: dict[str, Any] | None = None,
    ) -> VnnoxResponse:
        path = f"{API_PREFIX}/{terminal_id}{suffix}"
        client = await self._get_client()

        try:
            response = await client.request(
                method,
                path,
                json=json,
                headers=self._auth_headers(method, path),
            )
            response.raise_for_status()
            return response_model.model_validate(response.json())

        except httpx.TimeoutException as e:
            logger.error(
                f"VNNOX API timeout: {method} {path}",
                extra={"terminal_id": terminal_id},
            )
            raise RemoteUnavailableError(f"timeout calling {path}", terminal_id) from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(
                f"VNNOX API Error: {method} {path} -> {status_code}",
                extra={"terminal_id": terminal_id, "status": status_code, "body": e.response.text[:500]},
            )
            raise RemoteUnavailableError(
                f"HTTP {status_code} from {path}", terminal_id, status_code
            ) from e
        except httpx.HTTPError as e:
            logger.error(
                f"VNNOX API Error: {method} {path}: {e}",
                extra={"terminal_id": terminal_id},
            )
            raise RemoteUnavailableError(str(e) or type(e).__name__, terminal_id) from e
        except (ValueError, ValidationError) as e:
            logger.error(
                f"VNNOX API returned malformed payload for {path}: {e}",
                extra={"terminal_id": terminal_id},
            )
            raise RemoteUnavailableError(f"malformed payload from {path}", terminal_id) from e

    # Terminal management

    async def get_terminal_info(self, terminal_id: str) -> CommandResponse:
        return await self._request("GET", terminal_id, "", CommandResponse)

    async def get_status(self, terminal_id: str) -> StatusResponse:
        """Online state of a terminal"""
        return await self._request("GET", terminal_id, "/status", StatusResponse)

    # Content management

    async def get_playing_content(self, terminal_id: str) -> PlayingResponse:
        """Content currently playing on a terminal"""
        return await self._request("GET", terminal_id, "/playing", PlayingResponse)

    async def publish_content(self, terminal_id: str, content_id: str) -> CommandResponse:
        """Push content to a terminal so it starts playing"""
        return await self._request(
            "POST", terminal_id, "/publish", CommandResponse, json={"contentId": content_id}
        )

    # System operations

    async def reboot_terminal(self, terminal_id: str) -> CommandResponse:
        return await self._request("POST", terminal_id, "/reboot", CommandResponse)
