"""
HubSpot-specific data formatting and extraction utilities.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Any, Dict, List, Optional

from common.models import Client, ClientReport, Deal

CLIENT_PROPERTIES = ["name", "logo_url", "report_url"]
DEAL_PROPERTIES = ["dealname", "dealstage", "amount", "closedate", "createdate"]

DEFAULT_CLIENT_NAME = "Unnamed Client"
DEFAULT_DEAL_NAME = "Unnamed Deal"
DEFAULT_DEAL_STAGE = "No stage"
ZERO_AMOUNT = "$0"

_CENTS = Decimal("0.01")


def extract_properties(
    obj: Dict[str, Any], property_names: List[str]
) -> Dict[str, Any]:
    """
    Extract specific properties from a HubSpot CRM object.

    Args:
        obj: HubSpot object as returned by the v3 objects API
        property_names: List of property names to extract

    Returns:
        Dict of extracted properties (missing ones are omitted)
    """
    properties = obj.get("properties") or {}
    return {name: properties.get(name) for name in property_names if name in properties}


def format_amount(amount: Optional[Any]) -> str:
    """
    Format a raw HubSpot amount as US-dollar currency text.

    Absent or non-numeric amounts become ``"$0"``.

    >>> format_amount("1500")
    '$1,500.00'
    """
    if amount is None or str(amount).strip() == "":
        return ZERO_AMOUNT

    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        return ZERO_AMOUNT

    if not value.is_finite():
        return ZERO_AMOUNT

    # Default precision (28 digits) is too small for very large amounts
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        value = value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}${value.copy_abs():,.2f}"


def format_close_date(value: Optional[Any]) -> str:
    """
    Render a HubSpot date as a US short date (M/D/YYYY).

    Accepts ISO-8601 strings and epoch milliseconds. Anything unparseable is
    returned unchanged.
    """
    if value is None:
        return ""
    raw = str(value).strip()
    if not raw:
        return ""

    try:
        if raw.isdigit():
            parsed = datetime.fromtimestamp(int(raw) / 1000, tz=timezone.utc)
        else:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except (ValueError, OverflowError, OSError):
        return raw

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)

    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def hubspot_object_to_client(client_id: str, obj: Dict[str, Any]) -> Client:
    props = extract_properties(obj, CLIENT_PROPERTIES)
    return Client(
        id=str(client_id),
        name=props.get("name") or DEFAULT_CLIENT_NAME,
        logo_url=props.get("logo_url") or "",
        report_url=props.get("report_url") or "",
    )


def hubspot_deal_to_deal(deal: Dict[str, Any]) -> Deal:
    props = extract_properties(deal, DEAL_PROPERTIES)
    return Deal(
        id=str(deal.get("id", "")),
        name=props.get("dealname") or DEFAULT_DEAL_NAME,
        stage=props.get("dealstage") or DEFAULT_DEAL_STAGE,
        amount=format_amount(props.get("amount")),
        close_date=props.get("closedate") or "",
        create_date=props.get("createdate") or "",
    )


def build_client_report(
    client_id: str, client_obj: Dict[str, Any], deals: List[Dict[str, Any]]
) -> ClientReport:
    """Combine a raw client object and raw deals into a ClientReport."""
    return ClientReport(
        client=hubspot_object_to_client(client_id, client_obj),
        deals=[hubspot_deal_to_deal(d) for d in deals],
    )
