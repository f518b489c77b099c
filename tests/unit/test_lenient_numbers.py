"""Unit tests for lenient numeric parsing of seller-entered text."""
from decimal import Decimal

import pytest

from src.domain.services.lenient_numbers import parse_leniently


class TestParseLeniently:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("$1,200.50", Decimal("1200.50")),
            ("12kg", Decimal("12")),
            ("  450 ", Decimal("450")),
            ("USD 3000", Decimal("3000")),
        ],
    )
    def test_extracts_number_from_text(self, raw: str, expected: Decimal) -> None:
        assert parse_leniently(raw) == expected

    @pytest.mark.parametrize("value", [42, 3.5, Decimal("9.99")])
    def test_numbers_pass_through(self, value: object) -> None:
        assert parse_leniently(value) == value

    @pytest.mark.parametrize("raw", ["", "call for price", "1.2.3", "..."])
    def test_unparseable_text_returns_none(self, raw: str) -> None:
        assert parse_leniently(raw) is None

    @pytest.mark.parametrize("value", [None, True, [], {"price": 1}])
    def test_non_text_returns_none(self, value: object) -> None:
        assert parse_leniently(value) is None
