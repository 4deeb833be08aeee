"""
HTTP client for the location endpoints.
"""
import httpx
from typing import Optional

from client.geolocation import Fix
import config

UPDATE_PATH = "/api/location/update"


class LocationApi:
    """
    Thin wrapper over httpx.Client.

    No request timeout is set by default, so a push waits as long as the
    connection does.
    """

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
    ):
        self.client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def push_location(self, fix: Fix, token: str) -> httpx.Response:
        """
        POST one fix with the given bearer token.

        Raises:
            httpx.TransportError: If the request could not be sent or no response arrived
        """
        return self.client.post(
            UPDATE_PATH,
            json=fix.to_payload(),
            headers={"Authorization": f"Bearer {token}"},
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
