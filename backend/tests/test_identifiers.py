"""
Tests for identifier normalization and parsing helpers.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.services.identifiers import build_gid, extract_order_number, normalize, normalize_swap
from app.services.parsing import (
    extract_addresses,
    format_shopify_query_date,
    format_swap_query_date,
    money,
    parse_iso,
    parse_swap_date,
    to_decimal,
)


class TestNormalize:
    """Tests for Shopify GID normalization."""

    @pytest.mark.parametrize(
        "raw, kind, expected",
        [
            ("gid://shopify/Order/5731234567", "Order", "5731234567"),
            ("gid://shopify/ProductVariant/42", "ProductVariant", "42"),
            ("gid://shopify/Order/5731234567", None, "5731234567"),
            ("5731234567", "Order", "5731234567"),
            ("gid://shopify/Product/1", "Order", "gid://shopify/Product/1"),
            ("", "Order", ""),
            (None, "Order", ""),
        ],
    )
    def test_normalize(self, raw, kind, expected):
        assert normalize(raw, kind) == expected

    def test_normalize_is_idempotent(self):
        once = normalize("gid://shopify/LineItem/777", "LineItem")
        assert normalize(once, "LineItem") == once

    def test_build_gid_round_trips(self):
        assert normalize(build_gid("Collection", "99"), "Collection") == "99"

    def test_swap_ids_pass_through(self):
        assert normalize_swap("ret_abc123") == "ret_abc123"
        assert normalize_swap(None) == ""


class TestOrderNumber:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("#1001", 1001),
            ("SW-#1298", 1298),
            ("no digits", 0),
            (None, 0),
            ("2025-01-15-#44", 2025),
        ],
    )
    def test_extract_order_number(self, name, expected):
        assert extract_order_number(name) == expected


class TestParsing:
    def test_to_decimal_is_exact(self):
        assert to_decimal("19.99") == Decimal("19.99")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("", default=None) is None
        assert to_decimal("abc") == Decimal("0")

    def test_money_reads_shop_and_presentment(self):
        bag = {
            "shopMoney": {"amount": "10.50", "currencyCode": "USD"},
            "presentmentMoney": {"amount": "9.75", "currencyCode": "EUR"},
        }
        assert money(bag) == Decimal("10.50")
        assert money(bag, "presentmentMoney") == Decimal("9.75")
        assert money(None) is None

    def test_parse_iso_with_z(self):
        parsed = parse_iso("2025-01-10T12:00:00Z")
        assert parsed == datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)
        assert parse_iso(None) is None

    def test_parse_swap_date_four_letter_month(self):
        parsed = parse_swap_date("23 Sept 2025, 14:52:21")
        assert parsed == datetime(2025, 9, 23, 14, 52, 21, tzinfo=timezone.utc)

    def test_parse_swap_date_three_letter_month(self):
        assert parse_swap_date("1 Mar 2024, 00:00:05") == datetime(
            2024, 3, 1, 0, 0, 5, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("value", ["N/A", "", None, "yesterday", "31 Foo 2025, 10:00:00"])
    def test_parse_swap_date_invalid(self, value):
        assert parse_swap_date(value) is None

    def test_query_date_formats(self):
        moment = datetime(2024, 1, 1, 0, 0, 0, 123000, tzinfo=timezone.utc)
        assert format_swap_query_date(moment) == "2024-01-01T00:00:00Z"
        assert format_shopify_query_date(datetime(2024, 1, 1)) == "2024-01-01T00:00:00Z"

    def test_extract_addresses_accepts_both_key_styles(self):
        fields = extract_addresses(
            {"city": "Austin", "state_province_code": "TX", "country_code": "US", "postcode": "73301"},
            {"city": "Leeds", "province": "WYK", "country_code": "GB", "zip": "LS1"},
        )
        assert fields["billing_state_province"] == "TX"
        assert fields["billing_postcode"] == "73301"
        assert fields["shipping_state_province"] == "WYK"
        assert fields["shipping_postcode"] == "LS1"

    def test_extract_addresses_missing(self):
        fields = extract_addresses(None, None)
        assert fields["billing_city"] is None
        assert fields["shipping_country_code"] is None
