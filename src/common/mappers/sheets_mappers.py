"""
Google Sheets layout for the client deals report.

Row layout (1-based):
    1  Logo:     =IMAGE(...) or placeholder
    2  Client:   <name>
    3  (blank)
    4  ASSOCIATED DEALS
    5  Deal Name | Stage | Amount | Close Date
    6+ one row per deal, or a single "no deals" row
"""

import re
from typing import Any, Dict, List, Optional

from common.exceptions import ValidationException
from common.mappers.hubspot_mappers import format_close_date
from common.models import ClientReport

SHEETS_URL_TEMPLATE = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/edit#gid=0"
SPREADSHEET_ID_PATTERN = re.compile(r"/spreadsheets/d/([a-zA-Z0-9_-]+)")

CLEAR_RANGE = "A:Z"
WRITE_RANGE = "A1"
REPORT_COLUMNS = ["Deal Name", "Stage", "Amount", "Close Date"]
SECTION_HEADER = "ASSOCIATED DEALS"
NO_LOGO = "Not available"
NO_DEALS = "No associated deals"

COLUMN_WIDTH_PX = 200
HEADER_GREY = {"red": 0.9, "green": 0.9, "blue": 0.9}
FIRST_SHEET_ID = 0


def report_title(client_name: str) -> str:
    return f"{client_name} - Deals Report"


def spreadsheet_url(spreadsheet_id: str) -> str:
    return SHEETS_URL_TEMPLATE.format(spreadsheet_id=spreadsheet_id)


def extract_spreadsheet_id(url: str) -> str:
    """
    Pull the spreadsheet ID out of a Google Sheets URL.

    Raises:
        ValidationException: If the URL has no ``/spreadsheets/d/<id>`` segment
    """
    match = SPREADSHEET_ID_PATTERN.search(url or "")
    if not match:
        raise ValidationException(
            "Invalid Google Sheets URL format", details={"url": url}
        )
    return match.group(1)


def image_formula(logo_url: str) -> str:
    escaped = logo_url.replace('"', '""')
    return f'=IMAGE("{escaped}", 1)'


def build_report_rows(report: ClientReport) -> List[List[str]]:
    """Build the full cell grid written to the report, starting at A1."""
    client = report.client
    rows: List[List[str]] = []

    if client.logo_url:
        rows.append(["Logo:", image_formula(client.logo_url)])
    else:
        rows.append(["Logo:", NO_LOGO])

    rows.append(["Client:", client.name])
    rows.append([""])
    rows.append([SECTION_HEADER])
    rows.append(list(REPORT_COLUMNS))

    if report.deals:
        for deal in report.deals:
            rows.append(
                [deal.name, deal.stage, deal.amount, format_close_date(deal.close_date)]
            )
    else:
        rows.append([NO_DEALS, "", "", ""])

    return rows


def _bold_range(start_row: int, end_row: int, end_col: int) -> Dict[str, Any]:
    return {
        "sheetId": FIRST_SHEET_ID,
        "startRowIndex": start_row,
        "endRowIndex": end_row,
        "startColumnIndex": 0,
        "endColumnIndex": end_col,
    }


def build_format_requests(logo_row_height: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Build the spreadsheets.batchUpdate requests for the report layout.

    Args:
        logo_row_height: Optional pixel height for the first (logo) row

    Returns:
        List of batchUpdate request dicts
    """
    requests = [
        # Logo / client labels
        {
            "repeatCell": {
                "range": _bold_range(0, 2, 2),
                "cell": {"userEnteredFormat": {"textFormat": {"bold": True}}},
                "fields": "userEnteredFormat.textFormat.bold",
            }
        },
        # Section header + column headers
        {
            "repeatCell": {
                "range": _bold_range(3, 5, len(REPORT_COLUMNS)),
                "cell": {
                    "userEnteredFormat": {
                        "textFormat": {"bold": True},
                        "backgroundColor": dict(HEADER_GREY),
                    }
                },
                "fields": "userEnteredFormat.textFormat.bold,userEnteredFormat.backgroundColor",
            }
        },
        {
            "updateDimensionProperties": {
                "range": {
                    "sheetId": FIRST_SHEET_ID,
                    "dimension": "COLUMNS",
                    "startIndex": 0,
                    "endIndex": len(REPORT_COLUMNS),
                },
                "properties": {"pixelSize": COLUMN_WIDTH_PX},
                "fields": "pixelSize",
            }
        },
    ]

    if logo_row_height:
        requests.append(
            {
                "updateDimensionProperties": {
                    "range": {
                        "sheetId": FIRST_SHEET_ID,
                        "dimension": "ROWS",
                        "startIndex": 0,
                        "endIndex": 1,
                    },
                    "properties": {"pixelSize": logo_row_height},
                    "fields": "pixelSize",
                }
            }
        )

    return requests
