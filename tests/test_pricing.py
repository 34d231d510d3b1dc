from decimal import Decimal

from services.pricing import effective_price, line_total, order_total, round_money


def test_effective_price_without_discount():
    assert effective_price("199.99", 0) == Decimal("199.99")
    assert effective_price("199.99", None) == Decimal("199.99")


def test_effective_price_applies_percentage():
    assert effective_price("200", 25) == Decimal("150.00")
    assert effective_price("450.00", "10") == Decimal("405.00")


def test_effective_price_rounds_to_cents():
    # 99.99 * 0.85 = 84.9915
    assert effective_price("99.99", 15) == Decimal("84.99")
    # 10.05 * 0.5 = 5.025 rounds half up
    assert effective_price("10.05", 50) == Decimal("5.03")


def test_full_discount_is_free():
    assert effective_price("80", 100) == Decimal("0.00")


def test_line_and_order_totals():
    assert line_total("12.50", 3) == Decimal("37.50")
    items = [{"price": "12.50", "quantity": 3}, {"price": Decimal("0.10"), "quantity": 7}]
    assert order_total(items) == Decimal("38.20")
    assert order_total([]) == Decimal("0.00")


def test_round_money_accepts_floats():
    assert round_money(0.1 + 0.2) == Decimal("0.30")
