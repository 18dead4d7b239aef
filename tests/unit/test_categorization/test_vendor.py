"""Tests for vendor normalization and rough vendor extraction."""

import pytest

from aura.categorization.vendor import extract_rough_vendor, normalize_vendor


class TestNormalizeVendor:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("digitalocean.com", "DIGITALOCEAN.COM"),
            ("  grab   *grabfood  ", "GRAB *GRABFOOD"),
            ("STARBUCKS...", "STARBUCKS"),
            ("Shopee.", "SHOPEE"),
            ("SP\tGROUP\n", "SP GROUP"),
            ("ACME . .", "ACME"),
        ],
    )
    def test_canonical_form(self, raw, expected):
        assert normalize_vendor(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", None, ".", "....", " . . "])
    def test_total_on_degenerate_input(self, raw):
        assert normalize_vendor(raw) == ""

    @pytest.mark.parametrize(
        "raw",
        ["digitalocean.com", "A. .", "  x  y.  ", "...abc...", "Ko Kee. Bak Chor Mee", "", "."],
    )
    def test_idempotent(self, raw):
        once = normalize_vendor(raw)
        assert normalize_vendor(once) == once

    def test_inner_dots_are_kept(self):
        assert normalize_vendor("amazon.sg") == "AMAZON.SG"


class TestExtractRoughVendor:
    def test_uob_alert(self):
        text = (
            "A transaction of SGD 16.23 was made with your UOB Card ending 8909 "
            "on 08/02/26 at DIGITALOCEAN.COM. If unauthorised, call 24/7 Fraud Hotline."
        )
        assert extract_rough_vendor(text) == "DIGITALOCEAN.COM"

    def test_terminates_at_comma(self):
        assert extract_rough_vendor("Spent S$48.00 at Grab, thank you") == "GRAB"

    def test_terminates_at_clause_keyword(self):
        assert extract_rough_vendor("SGD 5.00 at KOPITIAM on 01 Feb 2026") == "KOPITIAM"

    def test_end_of_text(self):
        assert extract_rough_vendor("Card used at Cold Storage") == "COLD STORAGE"

    def test_no_vendor(self):
        assert extract_rough_vendor("Your OTP is 123456") is None
        assert extract_rough_vendor("") is None
        assert extract_rough_vendor(None) is None
