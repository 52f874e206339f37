import pytest

from app.core.gst import (
    amounts_match,
    calculate_gst,
    calculate_line_tax,
    calculate_order_totals,
    calculate_shipping,
    format_gst_calculation,
    get_gst_suggestion,
    is_standard_gst_rate,
    validate_gst_rate,
)


class TestLineTax:
    def test_exclusive_adds_rate_on_top(self):
        assert calculate_line_tax(1000, 2, 18) == pytest.approx(360)

    def test_inclusive_extracts_embedded_tax(self):
        assert calculate_line_tax(1180, 1, 18, gst_inclusive=True) == pytest.approx(180)

    def test_missing_rate_counts_as_zero(self):
        assert calculate_line_tax(1000, 1, None) == 0
        assert calculate_line_tax(1000, 1, 0) == 0

    def test_missing_quantity_counts_as_one_unit(self):
        assert calculate_line_tax(1000, None, 18) == pytest.approx(180)


class TestCalculateGst:
    def test_exclusive(self):
        result = calculate_gst(1000, 18)
        assert result["base_price"] == 1000
        assert result["gst_amount"] == pytest.approx(180)
        assert result["total_price"] == pytest.approx(1180)
        assert result["gst_inclusive"] is False

    def test_inclusive(self):
        result = calculate_gst(1180, 18, gst_inclusive=True)
        assert result["base_price"] == pytest.approx(1000)
        assert result["gst_amount"] == pytest.approx(180)
        assert result["total_price"] == 1180

    def test_format(self):
        formatted = format_gst_calculation(calculate_gst(1000, 18))
        assert formatted["gst_rate"] == "18%"
        assert formatted["breakdown"] == "Base: ₹1,000.00 + GST: ₹180.00 = Total: ₹1,180.00"

    def test_format_inclusive(self):
        formatted = format_gst_calculation(calculate_gst(1180, 18, gst_inclusive=True))
        assert formatted["breakdown"] == "Total: ₹1,180.00 (incl. ₹180.00 GST)"


class TestOrderTotals:
    def test_mixed_rate_cart(self):
        totals = calculate_order_totals([
            {"price": 500, "quantity": 1, "gst_rate": 0, "gst_inclusive": False},
            {"price": 1000, "quantity": 1, "gst_rate": 18, "gst_inclusive": False},
        ])
        assert totals["items_price"] == 1500
        assert totals["tax_price"] == 180
        assert totals["shipping_price"] == 0
        assert totals["total_price"] == 1680
        assert [line["tax_amount"] for line in totals["lines"]] == [0, 180]

    def test_lines_without_quantity_are_single_units(self):
        totals = calculate_order_totals([
            {"price": 500, "gst_rate": 0},
            {"price": 1000, "gst_rate": 18, "quantity": 1},
        ])
        assert [line["quantity"] for line in totals["lines"]] == [1, 1]
        assert totals["items_price"] == 1500
        assert totals["tax_price"] == 180
        assert totals["total_price"] == 1680

    def test_free_shipping_judged_on_listed_price(self):
        totals = calculate_order_totals([
            {"price": 550, "quantity": 1, "gst_rate": 18, "gst_inclusive": True},
        ])
        assert totals["listed_subtotal"] == 550
        assert totals["items_price"] < 500
        assert totals["shipping_price"] == 0
        assert totals["total_price"] == 550

    def test_inclusive_tax_is_not_counted_twice(self):
        totals = calculate_order_totals([
            {"price": 1180, "quantity": 1, "gst_rate": 18, "gst_inclusive": True},
        ])
        assert totals["items_price"] == 1000
        assert totals["tax_price"] == 180
        assert totals["total_price"] == 1180

    def test_total_is_sum_of_parts(self):
        totals = calculate_order_totals([
            {"price": 333.33, "quantity": 3, "gst_rate": 12, "gst_inclusive": True},
            {"price": 49.99, "quantity": 2, "gst_rate": 5, "gst_inclusive": False},
        ])
        assert totals["total_price"] == round(
            totals["items_price"] + totals["shipping_price"] + totals["tax_price"], 2
        )

    def test_small_order_pays_shipping(self):
        totals = calculate_order_totals([
            {"price": 200, "quantity": 1, "gst_rate": 5, "gst_inclusive": False},
        ])
        assert totals["shipping_price"] == 99
        assert totals["total_price"] == 309

    def test_empty_cart(self):
        totals = calculate_order_totals([])
        assert totals["items_price"] == 0
        assert totals["shipping_price"] == 0
        assert totals["total_price"] == 0

    def test_shipping_override(self):
        totals = calculate_order_totals(
            [{"price": 100, "quantity": 1, "gst_rate": 0, "gst_inclusive": False}],
            shipping_price=40,
        )
        assert totals["total_price"] == 140


def test_shipping_threshold_is_exclusive():
    assert calculate_shipping(499) == 99
    assert calculate_shipping(499.01) == 0
    assert calculate_shipping(0, item_count=0) == 0


def test_amounts_match_tolerance():
    assert amounts_match(1680, 1680.01)
    assert not amounts_match(1680, 1680.02)


class TestValidateGstRate:
    @pytest.mark.parametrize("rate", [0, 3, 5, 12, 18, 28, "18"])
    def test_standard_rates(self, rate):
        assert validate_gst_rate(rate) == {"valid": True}

    def test_decimal_rate_is_valid(self):
        assert validate_gst_rate(12.5) == {"valid": True}

    def test_non_standard_integer_warns(self):
        result = validate_gst_rate(7)
        assert result["valid"] is True
        assert "7% is not a standard GST rate" in result["warning"]

    @pytest.mark.parametrize("rate, error", [
        ("abc", "Please enter a valid number"),
        (-1, "GST rate cannot be negative"),
        (29, "GST rate cannot exceed 28%"),
        ("12.555", "GST rate can have maximum 2 decimal places"),
    ])
    def test_invalid_rates(self, rate, error):
        result = validate_gst_rate(rate)
        assert result["valid"] is False
        assert result["error"] == error


def test_is_standard_gst_rate():
    assert is_standard_gst_rate(12)
    assert not is_standard_gst_rate(7)


def test_gst_suggestion():
    assert get_gst_suggestion("Clothing")["rate"] == 12
    assert get_gst_suggestion("Kids Clothing")["hsn"] == "6203"
    assert get_gst_suggestion("books")["rate"] == 0
    assert get_gst_suggestion("xyz") is None
    assert get_gst_suggestion(None) is None
