"""
Domain models for the client deals report.

Client and Deal are read-only projections of HubSpot records; the remaining
models describe what happened to the spreadsheet during one sync so callers
can inspect best-effort outcomes without scraping logs.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class Client(BaseModel):
    """HubSpot custom 'Client' object."""

    id: str
    name: str
    logo_url: str = ""
    report_url: str = ""

    @property
    def has_report(self) -> bool:
        return bool(self.report_url and self.report_url.strip())


class Deal(BaseModel):
    """Deal associated with a client, with the amount already formatted."""

    id: str
    name: str
    stage: str
    amount: str
    close_date: str = ""
    create_date: str = ""


class ClientReport(BaseModel):
    """Everything needed to render a client's report sheet."""

    client: Client
    deals: List[Deal] = Field(default_factory=list)


class SpreadsheetRef(BaseModel):
    """A newly created spreadsheet and whether public sharing succeeded."""

    spreadsheet_id: str
    url: str
    permissions_granted: bool = False


class SheetUpdateResult(BaseModel):
    rows_written: int
    formatting_applied: bool = False


class ReportSyncResult(BaseModel):
    """Outcome of one webhook-triggered report sync."""

    client_id: str
    spreadsheet_id: str
    sheet_url: str
    is_new_sheet: bool
    deals_count: int
    # None when an existing sheet was reused and sharing was not attempted
    permissions_granted: Optional[bool] = None
    formatting_applied: bool = False

    def to_response(self) -> dict:
        return {
            "message": "Webhook processed successfully",
            "clientId": self.client_id,
            "dealsCount": self.deals_count,
            "sheetUrl": self.sheet_url,
            "isNewSheet": self.is_new_sheet,
            "permissionsGranted": self.permissions_granted,
            "formattingApplied": self.formatting_applied,
        }
