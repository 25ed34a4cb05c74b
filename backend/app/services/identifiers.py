"""
Canonical identifiers for external platform records.

Shopify GraphQL IDs look like ``gid://shopify/Order/5731234567``; the
local upsert key is the trailing number. SWAP IDs are already plain.
"""
import re
from typing import Optional

_GID_PATTERN = re.compile(r"^gid://shopify/(\w+)/(\d+)$")
_DIGITS = re.compile(r"\d+")


def normalize(raw_id: Optional[str], kind: Optional[str] = None) -> str:
    """
    Extract the numeric tail of a Shopify GID.

    Input that is not a GID (or is a GID of a different kind when `kind`
    is given) comes back unchanged. Never raises.
    """
    if not raw_id:
        return raw_id or ""
    match = _GID_PATTERN.match(raw_id)
    if match is None:
        return raw_id
    if kind is not None and match.group(1) != kind:
        return raw_id
    return match.group(2)


def normalize_swap(raw_id: Optional[str]) -> str:
    """SWAP identifiers are canonical as delivered."""
    return raw_id or ""


def build_gid(kind: str, numeric_id: str) -> str:
    return f"gid://shopify/{kind}/{numeric_id}"


def extract_order_number(name: Optional[str]) -> int:
    """
    First run of digits in an order name ("SW-#1298" -> 1298), else 0.

    Best effort only: names embedding dates or other numbers yield the
    first number found.
    """
    if not name:
        return 0
    match = _DIGITS.search(name)
    return int(match.group(0)) if match else 0
