"""Shopper cart kept on the client side.

The cart never lives in the database. A ``Cart`` works against whatever
storage it is handed, so the same rules apply to a browser-like local store,
a JSON file or a throwaway in-memory cart rebuilt for a price quote.
"""
import json
import os
from urllib.parse import quote

from services.pricing import effective_price, line_total, order_total, to_decimal

STORAGE_KEY = "beauty-shop-cart"


class MemoryCartStorage:
    def __init__(self, lines=None):
        self._lines = list(lines or [])

    def load(self):
        return [dict(line) for line in self._lines]

    def save(self, lines):
        self._lines = [dict(line) for line in lines]


class JSONFileCartStorage:
    """Persists cart lines to a JSON file; corrupted content loads as empty."""

    def __init__(self, path, key=STORAGE_KEY):
        self.path = path
        self.key = key

    def load(self):
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            return []
        lines = data.get(self.key) if isinstance(data, dict) else None
        return lines if isinstance(lines, list) else []

    def save(self, lines):
        with open(self.path, "w", encoding="utf-8") as fh:
            json.dump({self.key: lines}, fh, ensure_ascii=False)


def _color_key(color):
    if not color:
        return None
    return color.get("id")


def same_item(line, product_id, color_id):
    # no color only matches no color
    return line["id"] == product_id and _color_key(line.get("selected_color")) == color_id


class Cart:
    def __init__(self, storage=None):
        self.storage = storage if storage is not None else MemoryCartStorage()
        self.lines = self.storage.load()

    def _save(self):
        self.storage.save(self.lines)

    def _find(self, product_id, color_id=None):
        for index, line in enumerate(self.lines):
            if same_item(line, product_id, color_id):
                return index
        return None

    def add(self, product, quantity=1, color=None):
        """Add ``product`` (a dict with id, names, image, price, discount).

        A line for the same product and color gets its quantity increased.
        """
        quantity = int(quantity)
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        color_id = _color_key(color)
        index = self._find(product["id"], color_id)
        if index is not None:
            self.lines[index]["quantity"] += quantity
        else:
            price = to_decimal(product.get("price"))
            discount = to_decimal(product.get("discount"))
            line = {
                "id": product["id"],
                "name_fr": product.get("name_fr"),
                "name_ar": product.get("name_ar"),
                "image": product.get("image"),
                "price": float(price),
                "discount": float(discount),
                "final_price": float(effective_price(price, discount)),
                "quantity": quantity,
                "selected_color": dict(color) if color else None,
            }
            self.lines.append(line)

        self._save()
        return self.lines

    def remove(self, product_id, color_id=None):
        self.lines = [line for line in self.lines if not same_item(line, product_id, color_id)]
        self._save()
        return self.lines

    def update_quantity(self, product_id, quantity, color_id=None):
        quantity = int(quantity)
        if quantity <= 0:
            return self.remove(product_id, color_id)

        index = self._find(product_id, color_id)
        if index is None:
            return self.lines
        self.lines[index]["quantity"] = quantity
        self._save()
        return self.lines

    def clear(self):
        self.lines = []
        self._save()

    @property
    def item_count(self):
        return sum(line["quantity"] for line in self.lines)

    def total(self):
        return order_total(
            {"price": line["final_price"], "quantity": line["quantity"]} for line in self.lines
        )

    def to_order_items(self):
        return [
            {
                "product_id": line["id"],
                "quantity": line["quantity"],
                "price": line["final_price"],
                "color_id": _color_key(line.get("selected_color")),
            }
            for line in self.lines
        ]

    def whatsapp_message(self, lang="fr", currency="MAD", prefix=None):
        if prefix is None:
            prefix = "مرحبا، أود طلب:" if lang == "ar" else "Bonjour, je voudrais commander :"
        label = "المجموع" if lang == "ar" else "Total"

        rows = [prefix, ""]
        for number, line in enumerate(self.lines, start=1):
            name = line.get(f"name_{lang}") or line.get("name_fr") or ""
            color = line.get("selected_color")
            if color:
                name = f"{name} ({color.get(f'name_{lang}') or color.get('name_fr')})"
            subtotal = line_total(line["final_price"], line["quantity"])
            rows.append(f"{number}. {name} x {line['quantity']} = {subtotal:.2f} {currency}")
        rows.append("")
        rows.append(f"{label}: {self.total():.2f} {currency}")
        return "\n".join(rows)


def whatsapp_url(number, message):
    return f"https://wa.me/{number}?text={quote(message)}"
