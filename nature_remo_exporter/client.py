"""
Nature Remo Cloud API client
Fetches the current device list with the latest sensor readings
"""
import logging
from typing import List

import requests
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .exceptions import AuthenticationError, MalformedResponseError, NatureRemoAPIError
from .models import Device

logger = logging.getLogger(__name__)

USER_AGENT = "nature-remo-exporter"


class NatureRemoClient:
    """Thin client for the Nature Remo Cloud API"""

    def __init__(self, token: str, base_url: str = "https://api.nature.global", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })

    @retry(
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        reraise=True,
    )
    def _get(self, path: str) -> requests.Response:
        return self.session.get(f"{self.base_url}{path}", timeout=self.timeout)

    def get_devices(self) -> List[Device]:
        """
        Get all devices with their newest sensor events.

        Raises:
            AuthenticationError: token rejected (401/403)
            NatureRemoAPIError: network failure or other non-2xx status
            MalformedResponseError: body is not a JSON list of devices
        """
        try:
            response = self._get("/1/devices")
        except requests.RequestException as e:
            raise NatureRemoAPIError(f"Error requesting device list: {e}") from e

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Nature Remo API rejected the access token (HTTP {response.status_code})",
                status_code=response.status_code
            )
        if not response.ok:
            raise NatureRemoAPIError(
                f"Nature Remo API returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Device list is not valid JSON: {e}") from e

        if not isinstance(payload, list):
            raise MalformedResponseError(f"Expected a JSON list of devices, got {type(payload).__name__}")

        try:
            devices = [Device.model_validate(item) for item in payload]
        except ValidationError as e:
            raise MalformedResponseError(f"Device list does not match schema: {e}") from e

        logger.debug(f"Fetched {len(devices)} devices from Nature Remo API")
        return devices

    def close(self):
        """Release the HTTP session"""
        self.session.close()
