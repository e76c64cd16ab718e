"""
Report sync orchestration: HubSpot client + deals -> Google Sheets report.
Decides between creating a new report and reusing the existing one.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional

from common.mappers import extract_spreadsheet_id
from common.models import ReportSyncResult

logger = logging.getLogger(__name__)

# Per-client locks shared by every service in this process. Module scope keeps
# them alive across invocations served by the same warm container. Entries are
# [lock, holders] and are dropped once no invocation holds or waits on them.
_client_locks: Dict[str, List] = {}
_client_locks_guard = threading.Lock()


@contextmanager
def client_lock(client_id: str):
    """Serialise work for one client across all services in this process."""
    key = str(client_id)
    with _client_locks_guard:
        entry = _client_locks.setdefault(key, [threading.Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _client_locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _client_locks[key]


class ReportSyncService:
    """
    Orchestrates one client report sync.

    A report is created at most once per client: when the client already
    carries a report_url, the spreadsheet ID embedded in that URL is trusted
    and reused.
    """

    def __init__(
        self,
        hubspot_client,
        sheets_client,
        share_roles: Iterable[str] = ("reader",),
    ):
        self.hubspot = hubspot_client
        self.sheets = sheets_client
        self.share_roles = list(share_roles)
        self.logger = logger

    def sync_client_report(self, client_id: str) -> ReportSyncResult:
        """
        Create or refresh the deals report for a client.

        Args:
            client_id: HubSpot client object ID

        Returns:
            ReportSyncResult describing the sheet and best-effort outcomes

        Raises:
            HubSpotAPIException: On any failed CRM call
            GoogleSheetsException: If the sheet cannot be created or written
            ValidationException: If an existing report_url has no sheet ID
        """
        # Only guards deliveries that land in the same container
        with client_lock(client_id):
            return self._sync(client_id)

    def _sync(self, client_id: str) -> ReportSyncResult:
        self.logger.info("Processing client ID: %s", client_id)
        report = self.hubspot.get_client_and_deals(client_id)
        client = report.client

        permissions_granted: Optional[bool] = None

        if not client.has_report:
            self.logger.info("No report URL found, creating new Google Sheet")
            sheet = self.sheets.create_spreadsheet(client.name, self.share_roles)
            spreadsheet_id = sheet.spreadsheet_id
            sheet_url = sheet.url
            permissions_granted = sheet.permissions_granted

            # Orphans the new sheet if this fails; nothing is rolled back
            self.hubspot.update_report_url(client_id, sheet_url)
            self.logger.info("New sheet created: %s", sheet_url)
            is_new_sheet = True
        else:
            self.logger.info("Existing report URL found, using existing sheet")
            sheet_url = client.report_url.strip()
            spreadsheet_id = extract_spreadsheet_id(sheet_url)
            is_new_sheet = False

        update = self.sheets.update_report(report, spreadsheet_id)
        self.logger.info("Google Sheet updated successfully")

        return ReportSyncResult(
            client_id=str(client_id),
            spreadsheet_id=spreadsheet_id,
            sheet_url=sheet_url,
            is_new_sheet=is_new_sheet,
            deals_count=len(report.deals),
            permissions_granted=permissions_granted,
            formatting_applied=update.formatting_applied,
        )
