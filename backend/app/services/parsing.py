"""
Field conversion helpers shared by the sync orchestrators.
"""
import json
import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from app.core.logging import get_logger

logger = get_logger(__name__)

# SWAP writes "Sept" where strptime expects "Sep"
_SWAP_DATE = re.compile(r"^(\d{1,2}) ([A-Za-z]{3,4}) (\d{4}), (\d{2}:\d{2}:\d{2})$")


def to_decimal(value: Any, default: Optional[Decimal] = Decimal("0")) -> Optional[Decimal]:
    """Exact decimal from an API number or string; missing values give `default`."""
    if value is None or value == "":
        return default
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.warning("Unparseable amount", value=value)
        return default


def money(money_set: Optional[dict[str, Any]], key: str = "shopMoney") -> Optional[Decimal]:
    """Amount from a Shopify MoneyBag (`{shopMoney: {amount}, presentmentMoney: {...}}`)."""
    if not money_set:
        return None
    bag = money_set.get(key) or {}
    return to_decimal(bag.get("amount"), default=None)


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse Shopify ISO-8601 timestamps, including a trailing Z."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_swap_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse SWAP's display format, e.g. "23 Sept 2025, 14:52:21".

    "N/A", empty and unparseable values give None. Timestamps are UTC.
    """
    if not value or value == "N/A":
        return None
    match = _SWAP_DATE.match(value.strip())
    if match is None:
        logger.warning("Failed to parse SWAP date", value=value)
        return None
    day, month, year, clock = match.groups()
    try:
        parsed = datetime.strptime(f"{day} {month[:3]} {year} {clock}", "%d %b %Y %H:%M:%S")
    except ValueError:
        logger.warning("Failed to parse SWAP date", value=value)
        return None
    return parsed.replace(tzinfo=timezone.utc)


def format_swap_query_date(value: datetime) -> str:
    """UTC timestamp without milliseconds, e.g. 2024-01-01T00:00:00Z."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def format_shopify_query_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def json_list(value: Any) -> Optional[str]:
    """JSON text for list-valued fields, passing strings through."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(value)


def extract_addresses(
    billing: Optional[dict[str, Any]],
    shipping: Optional[dict[str, Any]],
) -> dict[str, Optional[str]]:
    """Denormalized city/province/country/postcode columns for both addresses."""
    fields: dict[str, Optional[str]] = {}
    for prefix, address in (("billing", billing), ("shipping", shipping)):
        address = address or {}
        fields[f"{prefix}_city"] = address.get("city")
        fields[f"{prefix}_state_province"] = address.get("state_province_code") or address.get("province")
        fields[f"{prefix}_country_code"] = address.get("country_code")
        fields[f"{prefix}_postcode"] = address.get("postcode") or address.get("zip")
    return fields
