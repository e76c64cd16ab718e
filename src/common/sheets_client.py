"""
Google Sheets / Drive client for the client deals report.
All calls are made with service account authentication.

Sharing and formatting are best-effort: failures are logged and reported
back as False on the result models, never raised.
"""

import os
import logging
from typing import Iterable, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build

from common.exceptions import GoogleSheetsException, ValidationException
from common.mappers import (
    CLEAR_RANGE,
    WRITE_RANGE,
    build_format_requests,
    build_report_rows,
    report_title,
    spreadsheet_url,
)
from common.models import ClientReport, SheetUpdateResult, SpreadsheetRef

logger = logging.getLogger(__name__)

GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]

# USER_ENTERED lets the =IMAGE() logo formula evaluate
VALUE_INPUT_OPTION = "USER_ENTERED"


def get_google_credentials(
    client_email: Optional[str] = None, private_key: Optional[str] = None
):
    """
    Build service account credentials from an email and PEM private key.

    Args:
        client_email: Service account email (defaults to GOOGLE_CLIENT_EMAIL)
        private_key: PEM key (defaults to GOOGLE_PRIVATE_KEY). Escaped ``\\n``
            sequences, as stored in most secret managers, are unescaped.

    Returns:
        Service account credentials object
    """
    client_email = client_email or os.environ.get("GOOGLE_CLIENT_EMAIL")
    private_key = private_key or os.environ.get("GOOGLE_PRIVATE_KEY")

    if not client_email or not private_key:
        raise ValueError(
            "Google service account credentials not found. "
            "Set GOOGLE_CLIENT_EMAIL and GOOGLE_PRIVATE_KEY environment variables."
        )

    info = {
        "type": "service_account",
        "client_email": client_email,
        "private_key": private_key.replace("\\n", "\n"),
        "token_uri": "https://oauth2.googleapis.com/token",
    }
    return service_account.Credentials.from_service_account_info(
        info, scopes=GOOGLE_SCOPES
    )


class GoogleSheetsClient:
    """Creates, shares, fills and formats report spreadsheets."""

    def __init__(
        self,
        credentials=None,
        sheets_service=None,
        drive_service=None,
        logo_row_height: Optional[int] = None,
    ):
        if sheets_service is None or drive_service is None:
            credentials = credentials or get_google_credentials()
        self.sheets = sheets_service or build(
            "sheets", "v4", credentials=credentials, cache_discovery=False
        )
        self.drive = drive_service or build(
            "drive", "v3", credentials=credentials, cache_discovery=False
        )
        self.logo_row_height = logo_row_height

    # ------------------------------------------------------------------
    # Create / share
    # ------------------------------------------------------------------

    def create_spreadsheet(
        self, client_name: str, share_roles: Iterable[str] = ("reader",)
    ) -> SpreadsheetRef:
        """
        Create a new report spreadsheet and try to make it public.

        Args:
            client_name: Client display name, used in the title
            share_roles: Drive roles to grant to 'anyone'

        Returns:
            SpreadsheetRef with the new ID, canonical URL and sharing outcome
        """
        logger.info("Creating new Google Sheet for client: %s", client_name)
        try:
            created = (
                self.sheets.spreadsheets()
                .create(body={"properties": {"title": report_title(client_name)}})
                .execute()
            )
        except Exception as e:
            raise GoogleSheetsException(
                f"Error creating spreadsheet: {e}", details={"client_name": client_name}
            ) from e

        spreadsheet_id = created["spreadsheetId"]
        logger.info("New spreadsheet created with ID: %s", spreadsheet_id)

        permissions_granted = self.share_publicly(spreadsheet_id, share_roles)

        return SpreadsheetRef(
            spreadsheet_id=spreadsheet_id,
            url=spreadsheet_url(spreadsheet_id),
            permissions_granted=permissions_granted,
        )

    def share_publicly(self, spreadsheet_id: str, roles: Iterable[str]) -> bool:
        """Grant each role to 'anyone'. Returns False if any grant failed."""
        granted_all = True
        for role in roles:
            try:
                self.drive.permissions().create(
                    fileId=spreadsheet_id,
                    body={"role": role, "type": "anyone"},
                ).execute()
                logger.info("Sheet %s shared publicly as %s", spreadsheet_id, role)
            except Exception as e:
                logger.warning(
                    "Could not set public %s permission on %s: %s",
                    role,
                    spreadsheet_id,
                    e,
                )
                granted_all = False
        return granted_all

    # ------------------------------------------------------------------
    # Contents
    # ------------------------------------------------------------------

    def update_report(
        self, report: ClientReport, spreadsheet_id: str
    ) -> SheetUpdateResult:
        """
        Replace the sheet contents with the report for ``report.client``.

        Existing values are always cleared first; there is no merge.
        """
        if not spreadsheet_id:
            raise ValidationException("spreadsheetId is required")

        values = self.sheets.spreadsheets().values()
        rows = build_report_rows(report)

        try:
            values.clear(spreadsheetId=spreadsheet_id, range=CLEAR_RANGE, body={}).execute()
            logger.info("Sheet %s cleared", spreadsheet_id)

            values.update(
                spreadsheetId=spreadsheet_id,
                range=WRITE_RANGE,
                valueInputOption=VALUE_INPUT_OPTION,
                body={"values": rows},
            ).execute()
        except Exception as e:
            raise GoogleSheetsException(
                f"Error updating spreadsheet: {e}",
                details={"spreadsheet_id": spreadsheet_id},
            ) from e

        formatting_applied = self.apply_formatting(spreadsheet_id)

        logger.info(
            "Google Sheet %s updated with %d deals", spreadsheet_id, len(report.deals)
        )
        return SheetUpdateResult(
            rows_written=len(rows), formatting_applied=formatting_applied
        )

    def apply_formatting(self, spreadsheet_id: str) -> bool:
        """Apply header styling and column widths. Returns False on failure."""
        requests = build_format_requests(self.logo_row_height)
        try:
            self.sheets.spreadsheets().batchUpdate(
                spreadsheetId=spreadsheet_id, body={"requests": requests}
            ).execute()
        except Exception as e:
            logger.warning("Error applying formatting to %s: %s", spreadsheet_id, e)
            return False

        logger.debug("Formatting applied to %s", spreadsheet_id)
        return True
