"""
Domain-specific mapper modules for data transformation.

hubspot_mappers turns HubSpot CRM payloads into report models;
sheets_mappers lays those models out as spreadsheet rows and formatting.
"""

from .hubspot_mappers import (
    build_client_report,
    extract_properties,
    format_amount,
    format_close_date,
    hubspot_deal_to_deal,
    hubspot_object_to_client,
    CLIENT_PROPERTIES,
    DEAL_PROPERTIES,
)
from .sheets_mappers import (
    build_format_requests,
    build_report_rows,
    extract_spreadsheet_id,
    image_formula,
    report_title,
    spreadsheet_url,
    CLEAR_RANGE,
    WRITE_RANGE,
)

__all__ = [
    "build_client_report",
    "extract_properties",
    "format_amount",
    "format_close_date",
    "hubspot_deal_to_deal",
    "hubspot_object_to_client",
    "CLIENT_PROPERTIES",
    "DEAL_PROPERTIES",
    "build_format_requests",
    "build_report_rows",
    "extract_spreadsheet_id",
    "image_formula",
    "report_title",
    "spreadsheet_url",
    "CLEAR_RANGE",
    "WRITE_RANGE",
]
