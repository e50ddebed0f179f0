"""Tests for price normalization and money formatting."""

from decimal import Decimal

import pytest

from utils.prices import format_money, format_percent, normalize_price, parse_money


class TestNormalizePrice:
    """Test normalize_price across the shapes marketplaces return."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("12,50 €", "12.50"),
            ("12.50", "12.50"),
            ("1 200,00 €", "1200.00"),
            (12.5, "12.5"),
            (15, "15"),
            ({"amount": 1250, "currency_code": "EUR"}, "12.50"),
            ({"amount": "990"}, "9.90"),
        ],
    )
    def test_known_shapes(self, raw, expected):
        assert normalize_price(raw) == expected

    @pytest.mark.parametrize("raw", [None, True, [], {"currency_code": "EUR"}, "", "  € "])
    def test_unknown_or_empty_gives_zero(self, raw):
        assert normalize_price(raw) == "0"

    @pytest.mark.parametrize("raw", ["12,50 €", {"amount": 1999}, 7.25, "0", "100"])
    def test_idempotent(self, raw):
        once = normalize_price(raw)
        assert normalize_price(once) == once


class TestParseMoney:
    """Test parse_money for user-entered amounts."""

    def test_comma_decimal(self):
        assert parse_money("25,5") == Decimal("25.50")

    def test_rounds_half_up(self):
        assert parse_money("10.005") == Decimal("10.01")

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            parse_money("-1")

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            parse_money("abc")


class TestFormatting:
    def test_money_two_places(self):
        assert format_money(Decimal("2.5")) == "2.50"
        assert format_money(None) == "0.00"

    def test_no_negative_zero(self):
        assert format_money(Decimal("-0.001")) == "0.00"

    def test_percent_one_place(self):
        assert format_percent(Decimal("58.333")) == "58.3"
        assert format_percent(0) == "0.0"
