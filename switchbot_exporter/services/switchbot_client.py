"""SwitchBot cloud API client (v1.1) with request signing."""

import base64
import hashlib
import hmac
import logging
import time
import uuid
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from switchbot_exporter.exceptions import SwitchBotApiException
from switchbot_exporter.schemas.switchbot import DeviceList, DeviceStatus
from switchbot_exporter.utils.lifecycle_coordinator import (
    LifecycleCoordinatorProtocol,
    LifecycleEvent,
)

logger = logging.getLogger(__name__)

# statusCode reported by the API for a successful call
API_STATUS_SUCCESS = 100


class SwitchBotClient:
    """Synchronous client for the SwitchBot cloud API.

    Every request is signed with the open token and secret key as described
    by the SwitchBot API v1.1 authentication scheme. The underlying
    httpx.Client is shared across threads and closed on SHUTDOWN.
    """

    def __init__(
        self,
        open_token: str,
        secret_key: str,
        lifecycle_coordinator: LifecycleCoordinatorProtocol,
        base_url: str = "https://api.switch-bot.com",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            open_token: API open token from the SwitchBot app
            secret_key: API secret key from the SwitchBot app
            lifecycle_coordinator: Coordinator used to close the HTTP client
            base_url: API root URL
            timeout: Timeout in seconds for each outbound call
            transport: Optional httpx transport (used by tests)
        """
        self._open_token = open_token
        self._secret_key = secret_key
        self._http = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

        lifecycle_coordinator.register_lifecycle_notification(self._on_lifecycle_event)

        logger.info(f"SwitchBotClient initialized: base_url={base_url}, timeout={timeout}s")

    def list_devices(self) -> DeviceList:
        """Fetch the full inventory of physical devices and infrared remotes."""
        body = self._get("/v1.1/devices")
        try:
            return DeviceList.model_validate(body)
        except ValidationError as e:
            raise SwitchBotApiException(f"getting device list: malformed response: {e}") from e

    def get_status(self, device_id: str) -> DeviceStatus:
        """Fetch the current status of one device."""
        body = self._get(f"/v1.1/devices/{quote(device_id, safe='')}/status")
        try:
            return DeviceStatus.model_validate(body)
        except ValidationError as e:
            raise SwitchBotApiException(
                f"getting status of {device_id}: malformed response: {e}"
            ) from e

    def close(self) -> None:
        self._http.close()

    def _auth_headers(self) -> dict[str, str]:
        t = str(int(round(time.time() * 1000)))
        nonce = str(uuid.uuid4())
        string_to_sign = f"{self._open_token}{t}{nonce}".encode()
        sign = base64.b64encode(
            hmac.new(
                self._secret_key.encode(), msg=string_to_sign, digestmod=hashlib.sha256
            ).digest()
        ).decode("utf-8")

        return {
            "Authorization": self._open_token,
            "Content-Type": "application/json; charset=utf8",
            "t": t,
            "sign": sign,
            "nonce": nonce,
        }

    def _get(self, path: str) -> dict[str, Any]:
        """Perform a signed GET and unwrap the response envelope."""
        try:
            response = self._http.get(path, headers=self._auth_headers())
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise SwitchBotApiException(
                f"GET {path}: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise SwitchBotApiException(f"GET {path}: {e}") from e
        except ValueError as e:
            raise SwitchBotApiException(f"GET {path}: invalid JSON response") from e

        if not isinstance(payload, dict):
            raise SwitchBotApiException(f"GET {path}: unexpected response envelope")

        status_code = payload.get("statusCode")
        if status_code != API_STATUS_SUCCESS:
            message = payload.get("message") or "unknown error"
            raise SwitchBotApiException(
                f"GET {path}: {message} (statusCode {status_code})"
            )

        body = payload.get("body")
        return body if isinstance(body, dict) else {}

    def _on_lifecycle_event(self, event: LifecycleEvent) -> None:
        if event == LifecycleEvent.SHUTDOWN:
            self.close()
