"""
Tests for HubSpot and Google Sheets mapping functions.
"""

import pytest

from common.exceptions import ValidationException
from common.mappers import (
    build_client_report,
    build_format_requests,
    build_report_rows,
    extract_spreadsheet_id,
    format_amount,
    format_close_date,
    hubspot_deal_to_deal,
    hubspot_object_to_client,
    image_formula,
    report_title,
    spreadsheet_url,
)
from common.models import Client, ClientReport, Deal


@pytest.fixture
def raw_client():
    return {
        "id": "123",
        "properties": {
            "name": "Acme Corp",
            "logo_url": "https://cdn.example.com/acme.png",
            "report_url": None,
        },
    }


@pytest.fixture
def raw_deal():
    return {
        "id": "9001",
        "properties": {
            "dealname": "Acme Renewal",
            "dealstage": "closedwon",
            "amount": "1500",
            "closedate": "2025-06-30T00:00:00Z",
            "createdate": "2025-01-15T10:20:30.000Z",
        },
    }


# ---------------------------------------------------------------------------
# Amount formatting
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1500", "$1,500.00"),
        ("1234567.891", "$1,234,567.89"),
        ("0.005", "$0.01"),
        ("0", "$0.00"),
        ("-20.5", "-$20.50"),
        (2500, "$2,500.00"),
        (" 99 ", "$99.00"),
        ("1e30", "$1,000,000,000,000,000,000,000,000,000,000.00"),
        (
            "123456789012345678901234567890",
            "$123,456,789,012,345,678,901,234,567,890.00",
        ),
        ("-123456789012345678901234567890.555", "-$123,456,789,012,345,678,901,234,567,890.56"),
    ],
)
def test_format_amount(raw, expected):
    assert format_amount(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "NaN", "Infinity", "12,000"])
def test_format_amount_placeholder(raw):
    assert format_amount(raw) == "$0"


# ---------------------------------------------------------------------------
# Close date formatting
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2025-06-30T00:00:00Z", "6/30/2025"),
        ("2025-12-01", "12/1/2025"),
        ("2024-02-29T23:59:59.000+00:00", "2/29/2024"),
        ("1751241600000", "6/30/2025"),
        ("2024-01-15T23:00:00-05:00", "1/16/2024"),
        ("2024-01-16T02:00:00+05:00", "1/15/2024"),
        ("", ""),
        (None, ""),
        ("next quarter", "next quarter"),
    ],
)
def test_format_close_date(raw, expected):
    assert format_close_date(raw) == expected


# ---------------------------------------------------------------------------
# HubSpot -> models
# ---------------------------------------------------------------------------

def test_client_mapping(raw_client):
    client = hubspot_object_to_client("123", raw_client)

    assert client.id == "123"
    assert client.name == "Acme Corp"
    assert client.logo_url == "https://cdn.example.com/acme.png"
    assert client.report_url == ""
    assert not client.has_report


def test_client_mapping_defaults():
    client = hubspot_object_to_client(55, {"id": "55"})

    assert client.id == "55"
    assert client.name == "Unnamed Client"
    assert client.logo_url == ""
    assert client.report_url == ""


def test_whitespace_report_url_is_not_a_report():
    client = Client(id="1", name="A", report_url="   ")
    assert not client.has_report


def test_deal_mapping(raw_deal):
    deal = hubspot_deal_to_deal(raw_deal)

    assert deal.id == "9001"
    assert deal.name == "Acme Renewal"
    assert deal.stage == "closedwon"
    assert deal.amount == "$1,500.00"
    assert deal.close_date == "2025-06-30T00:00:00Z"
    assert deal.create_date == "2025-01-15T10:20:30.000Z"


def test_deal_mapping_defaults():
    deal = hubspot_deal_to_deal({"id": "1", "properties": {"amount": None}})

    assert deal.name == "Unnamed Deal"
    assert deal.stage == "No stage"
    assert deal.amount == "$0"
    assert deal.close_date == ""


def test_build_client_report(raw_client, raw_deal):
    report = build_client_report("123", raw_client, [raw_deal, raw_deal])

    assert report.client.name == "Acme Corp"
    assert len(report.deals) == 2


# ---------------------------------------------------------------------------
# Sheets layout
# ---------------------------------------------------------------------------

def test_report_title_and_url():
    assert report_title("Acme Corp") == "Acme Corp - Deals Report"
    assert spreadsheet_url("abc123") == "https://docs.google.com/spreadsheets/d/abc123/edit#gid=0"


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://docs.google.com/spreadsheets/d/1AbC-d_E/edit#gid=0", "1AbC-d_E"),
        ("https://docs.google.com/spreadsheets/d/xyz", "xyz"),
    ],
)
def test_extract_spreadsheet_id(url, expected):
    assert extract_spreadsheet_id(url) == expected


@pytest.mark.parametrize(
    "url", ["https://example.com/report", "https://docs.google.com/document/d/abc/edit", ""]
)
def test_extract_spreadsheet_id_invalid(url):
    with pytest.raises(ValidationException, match="Invalid Google Sheets URL format"):
        extract_spreadsheet_id(url)


def test_image_formula_escapes_quotes():
    assert image_formula('https://x.com/a"b.png') == '=IMAGE("https://x.com/a""b.png", 1)'


def test_build_report_rows_with_deals():
    report = ClientReport(
        client=Client(id="1", name="Acme Corp", logo_url="https://cdn.example.com/acme.png"),
        deals=[
            Deal(id="d1", name="Renewal", stage="closedwon", amount="$1,500.00",
                 close_date="2025-06-30T00:00:00Z"),
            Deal(id="d2", name="Upsell", stage="appointmentscheduled", amount="$0"),
        ],
    )

    rows = build_report_rows(report)

    assert rows == [
        ["Logo:", '=IMAGE("https://cdn.example.com/acme.png", 1)'],
        ["Client:", "Acme Corp"],
        [""],
        ["ASSOCIATED DEALS"],
        ["Deal Name", "Stage", "Amount", "Close Date"],
        ["Renewal", "closedwon", "$1,500.00", "6/30/2025"],
        ["Upsell", "appointmentscheduled", "$0", ""],
    ]


def test_build_report_rows_without_deals_or_logo():
    report = ClientReport(client=Client(id="1", name="Acme Corp"))

    rows = build_report_rows(report)

    assert rows[0] == ["Logo:", "Not available"]
    assert rows[-1] == ["No associated deals", "", "", ""]
    assert len(rows) == 6


def test_build_format_requests_default():
    requests = build_format_requests()

    assert len(requests) == 3
    labels, headers, widths = requests
    assert labels["repeatCell"]["range"]["endRowIndex"] == 2
    assert labels["repeatCell"]["cell"]["userEnteredFormat"]["textFormat"]["bold"] is True
    header_format = headers["repeatCell"]["cell"]["userEnteredFormat"]
    assert header_format["backgroundColor"] == {"red": 0.9, "green": 0.9, "blue": 0.9}
    assert headers["repeatCell"]["range"]["startRowIndex"] == 3
    assert headers["repeatCell"]["range"]["endColumnIndex"] == 4
    assert widths["updateDimensionProperties"]["properties"]["pixelSize"] == 200
    assert widths["updateDimensionProperties"]["range"]["dimension"] == "COLUMNS"


def test_build_format_requests_with_logo_row_height():
    requests = build_format_requests(logo_row_height=120)

    assert len(requests) == 4
    row = requests[-1]["updateDimensionProperties"]
    assert row["range"]["dimension"] == "ROWS"
    assert row["range"]["endIndex"] == 1
    assert row["properties"]["pixelSize"] == 120
