"""
Exceptions module
Error taxonomy for configuration, API access and refresh cycles
"""
from typing import Optional


class NatureRemoExporterError(Exception):
    """Base class for all exporter errors"""


class ConfigurationError(NatureRemoExporterError):
    """Invalid or missing startup configuration"""


class NatureRemoAPIError(NatureRemoExporterError):
    """Transport or HTTP level failure talking to the Nature Remo Cloud API"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(NatureRemoAPIError):
    """The access token was rejected (HTTP 401/403)"""


class MalformedResponseError(NatureRemoExporterError):
    """Response body is not JSON or does not match the device schema"""


class RefreshError(NatureRemoExporterError):
    """A refresh cycle failed, either while fetching or while updating metrics"""
