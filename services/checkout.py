from core.extensions import db
from models.orderModels import Order, OrderItem, ORDER_SOURCES
from models.productModels import Product, ProductColor
from services.pricing import effective_price, order_total


class CheckoutError(ValueError):
    def __init__(self, message, status=400):
        super().__init__(message)
        self.message = message
        self.status = status


def _pick(item, *keys):
    for key in keys:
        if item.get(key) not in (None, ""):
            return item[key]
    return None


def resolve_items(items):
    """Look up products and colors for submitted lines.

    Accepts ``product_id``/``productId`` and ``color_id``/``colorId`` keys.
    Returns a list of dicts with ``product``, ``color`` and ``quantity``.
    """
    if not isinstance(items, list) or not items:
        raise CheckoutError("No items in order")

    resolved = []
    for item in items:
        if not isinstance(item, dict):
            raise CheckoutError("Invalid order item")

        product_id = _pick(item, "product_id", "productId")
        color_id = _pick(item, "color_id", "colorId")
        quantity = item.get("quantity", 1)

        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise CheckoutError("Quantity must be a positive integer")

        try:
            product = db.session.get(Product, int(product_id)) if product_id is not None else None
        except (TypeError, ValueError):
            product = None
        if not product:
            raise CheckoutError(f"Product {product_id} not found", status=404)

        color = None
        if color_id is not None:
            try:
                color = db.session.get(ProductColor, int(color_id))
            except (TypeError, ValueError):
                color = None
            if not color or color.product_id != product.id:
                raise CheckoutError(f"Color {color_id} not found for product {product.id}", status=404)

        resolved.append({"product": product, "color": color, "quantity": quantity})
    return resolved


def validate_customer(data):
    missing = [f for f in ("name", "phone", "address") if not str(data.get(f) or "").strip()]
    if missing:
        raise CheckoutError(f"Missing required fields: {', '.join(missing)}")

    source = data.get("order_source") or "web"
    if source not in ORDER_SOURCES:
        raise CheckoutError(f"Invalid order source: {source}")
    return source


def create_order(data):
    """Insert the order header and its lines in one transaction.

    Unit prices are taken from the catalog at this moment, discount applied,
    and stored on each line. Returns (order, total, products).
    """
    source = validate_customer(data)
    lines = resolve_items(data.get("items"))

    order = Order(
        name=str(data["name"]).strip(),
        phone=str(data["phone"]).strip(),
        address=str(data["address"]).strip(),
        notes=str(data.get("notes") or "").strip() or None,
        order_source=source,
        status="pending",
    )

    for line in lines:
        product, color = line["product"], line["color"]
        order.order_items.append(OrderItem(
            product_id=product.id,
            color_id=color.id if color else None,
            quantity=line["quantity"],
            price=effective_price(product.price, product.discount),
            product_name_fr=product.name_fr,
            product_name_ar=product.name_ar,
            color_name_fr=color.name_fr if color else None,
            color_name_ar=color.name_ar if color else None,
            color_hex=color.hex_code if color else None,
        ))

    try:
        db.session.add(order)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    products = []
    for line in lines:
        if line["product"] not in products:
            products.append(line["product"])

    return order, order_total(order.order_items), products
