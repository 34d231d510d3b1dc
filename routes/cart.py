from core.imports import Blueprint, jsonify, request, current_app
from services.cart import Cart, whatsapp_url
from services.checkout import resolve_items, CheckoutError
from services.pricing import as_float

cart_bp = Blueprint("cart", __name__)


def serialize_line(line):
    return {
        "product_id": line["id"],
        "name_fr": line["name_fr"],
        "name_ar": line["name_ar"],
        "image": line["image"],
        "price": line["price"],
        "discount": line["discount"],
        "final_price": line["final_price"],
        "quantity": line["quantity"],
        "selected_color": line["selected_color"],
        "subtotal": as_float(line["final_price"] * line["quantity"])
    }


@cart_bp.route('/api/cart/summary', methods=['POST'])
def cart_summary():
    """
    Price a client-side cart against the live catalog
    ---
    tags:
      - Cart
    consumes:
      - application/json
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - items
          properties:
            lang:
              type: string
              example: fr
            items:
              type: array
              items:
                type: object
                properties:
                  product_id:
                    type: integer
                    example: 10
                  quantity:
                    type: integer
                    example: 2
                  color_id:
                    type: integer
                    example: 4
    responses:
      200:
        description: Merged lines with totals
        schema:
          type: object
          properties:
            items:
              type: array
              items:
                type: object
            item_count:
              type: integer
              example: 3
            total:
              type: number
              example: 449.5
            whatsapp_message:
              type: string
      400:
        description: Invalid cart lines
      404:
        description: Product or color not found
    """
    data = request.get_json(silent=True) or {}

    try:
        lines = resolve_items(data.get("items"))
    except CheckoutError as e:
        return jsonify({"message": e.message}), e.status

    cart = Cart()
    for line in lines:
        product, color = line["product"], line["color"]
        cart.add({
            "id": product.id,
            "name_fr": product.name_fr,
            "name_ar": product.name_ar,
            "image": product.image,
            "price": product.price,
            "discount": product.discount,
        }, line["quantity"], {
            "id": color.id,
            "name_fr": color.name_fr,
            "name_ar": color.name_ar,
            "hex_code": color.hex_code,
            "image": color.image,
        } if color else None)

    currency = current_app.config["CURRENCY"]
    message = cart.whatsapp_message(data.get("lang") or "fr", currency=currency)

    return jsonify({
        "items": [serialize_line(line) for line in cart.lines],
        "item_count": cart.item_count,
        "total": as_float(cart.total()),
        "currency": currency,
        "whatsapp_message": message,
        "whatsapp_url": whatsapp_url(current_app.config["WHATSAPP_NUMBER"], message)
    }), 200
