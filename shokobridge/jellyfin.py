"""
Jellyfin API client for looking up existing series
"""

import logging

import requests

from .models import ParentSeries

logger = logging.getLogger(__name__)


class JellyfinClient:
    """Client to interact with Jellyfin API"""

    def __init__(self, url: str, api_key: str):
        """
        Initialize Jellyfin client

        Args:
            url: Jellyfin server URL (e.g., http://localhost:8096)
            api_key: Jellyfin API key/token
        """
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.headers = {
            "X-Emby-Token": api_key,
            "Content-Type": "application/json",
        }

    def get_series(self, item_id: str) -> ParentSeries | None:
        """
        Fetch a series item so new seasons can be attached to it

        Returns:
            The series, or None if it does not exist or the request failed
        """
        try:
            endpoint = f"{self.url}/Items"
            params = {
                "Ids": item_id,
                "IncludeItemTypes": "Series",
                "Fields": "PresentationUniqueKey,PreferredMetadataLanguage,"
                "PreferredMetadataCountryCode",
            }
            response = requests.get(
                endpoint, headers=self.headers, params=params, timeout=10
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to fetch Jellyfin series {item_id}: {e}")
            return None

        items = response.json().get("Items", [])
        if not items:
            logger.warning(f"Jellyfin series {item_id} not found")
            return None

        item = items[0]
        return ParentSeries(
            id=item["Id"],
            name=item.get("Name", ""),
            presentation_unique_key=item.get("PresentationUniqueKey") or item["Id"],
            preferred_metadata_language=item.get("PreferredMetadataLanguage"),
            preferred_metadata_country_code=item.get("PreferredMetadataCountryCode"),
        )

    def test_connection(self) -> bool:
        """
        Test connection to Jellyfin server

        Returns:
            True if connection is successful, False otherwise
        """
        try:
            endpoint = f"{self.url}/System/Info"
            response = requests.get(endpoint, headers=self.headers, timeout=5)

            if response.status_code == 200:
                data = response.json()
                logger.info(
                    f"Connected to Jellyfin server: {data.get('ServerName', 'Unknown')} "
                    f"(version {data.get('Version', 'Unknown')})"
                )
                return True
            else:
                logger.warning(
                    f"Jellyfin connection test failed with status {response.status_code}"
                )
                return False

        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to connect to Jellyfin: {e}")
            return False
