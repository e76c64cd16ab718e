"""
HubSpot API client wrapper for the custom 'Client' object and its deals.
Fetches a client plus associated deals for the report, and records the
report URL back on the client.
"""

import os
import logging
import requests
from typing import Optional

from common.config import DEFAULT_CLIENT_OBJECT_TYPE_ID
from common.exceptions import HubSpotAPIException
from common.mappers import CLIENT_PROPERTIES, DEAL_PROPERTIES, build_client_report
from common.models import ClientReport

logger = logging.getLogger(__name__)

HUBSPOT_API_BASE = "https://api.hubapi.com"


class HubSpotClient:
    def __init__(
        self,
        access_token: Optional[str] = None,
        client_object_type_id: str = DEFAULT_CLIENT_OBJECT_TYPE_ID,
    ):
        self.access_token = (
            access_token
            or os.environ.get("HUBSPOT_ACCESS_TOKEN")
            or os.environ.get("HUBSPOT_API_KEY")
        )
        if not self.access_token:
            raise ValueError("HubSpot access token is required")

        self.client_object_type_id = client_object_type_id
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {self.access_token}",
                "Content-Type": "application/json",
            }
        )

    def _client_url(self, client_id: str) -> str:
        return f"{HUBSPOT_API_BASE}/crm/v3/objects/{self.client_object_type_id}/{client_id}"

    @staticmethod
    def _check(response: requests.Response, action: str) -> None:
        """Raise HubSpotAPIException on any non-2xx response."""
        if not response.ok:
            raise HubSpotAPIException(
                f"Error {action}: {response.status_code} {response.reason}",
                details={"status_code": response.status_code, "url": response.url},
            )

    # ------------------------------------------------------------------
    # Client (custom object)
    # ------------------------------------------------------------------

    def get_client(self, client_id: str) -> dict:
        """Fetch a client record with the properties the report needs."""
        params = {"properties": ",".join(CLIENT_PROPERTIES)}
        response = self.session.get(self._client_url(client_id), params=params)
        self._check(response, "fetching client")
        return response.json()

    def update_report_url(self, client_id: str, report_url: str) -> dict:
        """Store the report spreadsheet URL on the client."""
        logger.info("Updating report_url for client %s: %s", client_id, report_url)
        payload = {"properties": {"report_url": report_url}}
        response = self.session.patch(self._client_url(client_id), json=payload)
        self._check(response, "updating report_url")
        return response.json()

    # ------------------------------------------------------------------
    # Deals
    # ------------------------------------------------------------------

    def get_associated_deal_ids(self, client_id: str) -> list[str]:
        """Return the IDs of deals associated with a client."""
        url = f"{self._client_url(client_id)}/associations/deals"
        response = self.session.get(url)
        self._check(response, "fetching associations")
        results = response.json().get("results") or []
        return [str(assoc["id"]) for assoc in results]

    def batch_read_deals(self, deal_ids: list[str]) -> list[dict]:
        """Fetch deal details in a single batch call."""
        if not deal_ids:
            return []

        url = f"{HUBSPOT_API_BASE}/crm/v3/objects/deals/batch/read"
        payload = {
            "inputs": [{"id": deal_id} for deal_id in deal_ids],
            "properties": DEAL_PROPERTIES,
        }
        response = self.session.post(url, json=payload)
        self._check(response, "fetching deals")
        return response.json().get("results") or []

    def get_client_and_deals(self, client_id: str) -> ClientReport:
        """
        Fetch a client and all of its associated deals.

        Returns:
            ClientReport with defaults applied and amounts formatted
        """
        logger.info("Fetching client data for ID: %s", client_id)
        client_obj = self.get_client(client_id)

        deal_ids = self.get_associated_deal_ids(client_id)
        logger.info("Found %d associated deals", len(deal_ids))

        deals = self.batch_read_deals(deal_ids)
        logger.info("Retrieved %d deals", len(deals))

        return build_client_report(client_id, client_obj, deals)

    def close(self):
        """Close the HTTP session."""
        self.session.close()
