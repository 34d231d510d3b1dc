from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")


def to_decimal(value):
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def effective_price(price, discount=None):
    """Unit price after the percentage discount, rounded to cents.

    A missing or zero discount leaves the price untouched.
    """
    price = to_decimal(price)
    discount = to_decimal(discount)
    if discount > 0:
        price = price * (1 - discount / 100)
    return round_money(price)


def line_total(unit_price, quantity):
    return round_money(to_decimal(unit_price) * int(quantity))


def order_total(items):
    """Sum of price x quantity over objects or dicts exposing both."""
    total = Decimal("0")
    for item in items:
        if isinstance(item, dict):
            price, quantity = item["price"], item["quantity"]
        else:
            price, quantity = item.price, item.quantity
        total += to_decimal(price) * int(quantity)
    return round_money(total)


def as_float(value):
    return float(round_money(value))
