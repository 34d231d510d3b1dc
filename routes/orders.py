from core.imports import Blueprint, jsonify, request, current_app, datetime, timedelta, func, send_file, SQLAlchemyError
from core.extensions import db
from core.security import admin_required
from models.orderModels import Order
from services import order_status
from services.cart import Cart, whatsapp_url
from services.checkout import create_order, CheckoutError
from services.exports import export_orders, UnsupportedFormat
from services.notifications import notify_new_order
from services.pricing import as_float, order_total

orders_bp = Blueprint('orders', __name__)


def serialize_item(item):
    product = item.product
    return {
        "id": item.id,
        "order_id": item.order_id,
        "product_id": item.product_id,
        "color_id": item.color_id,
        "quantity": item.quantity,
        "price": as_float(item.price),
        "subtotal": as_float(item.price * item.quantity),
        "name_fr": item.product_name_fr,
        "name_ar": item.product_name_ar,
        "image": product.image if product else None,
        "color_name_fr": item.color_name_fr,
        "color_name_ar": item.color_name_ar,
        "color_hex": item.color_hex
    }


def serialize_order(order, with_items=False):
    # totals come from the stored line prices, never from the live catalog
    data = {
        "id": order.id,
        "name": order.name,
        "phone": order.phone,
        "address": order.address,
        "notes": order.notes,
        "status": order.status,
        "order_source": order.order_source,
        "order_date": order.order_date.isoformat() if order.order_date else None,
        "completed_date": order.completed_date.isoformat() if order.completed_date else None,
        "total": as_float(order_total(order.order_items)),
        "item_count": sum(i.quantity for i in order.order_items),
        "next_statuses": order_status.next_statuses(order.status)
    }
    if with_items:
        data["items"] = [serialize_item(i) for i in order.order_items]
    return data


def count_by_status():
    rows = db.session.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
    counts = {status: 0 for status in order_status.STATUSES}
    counts.update({status: count for status, count in rows})
    return counts


def _parse_day(value, field):
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be formatted YYYY-MM-DD")


def filtered_orders(args):
    """Apply the admin order-queue filters from query args."""
    query = Order.query

    status = args.get("status")
    if status and status != "all":
        if status not in order_status.STATUSES:
            raise ValueError(f"Invalid status: {status}")
        query = query.filter(Order.status == status)

    source = args.get("source")
    if source:
        query = query.filter(Order.order_source == source)

    if args.get("startDate"):
        query = query.filter(Order.order_date >= _parse_day(args["startDate"], "startDate"))
    if args.get("endDate"):
        end = _parse_day(args["endDate"], "endDate") + timedelta(days=1)
        query = query.filter(Order.order_date < end)

    order_id = (args.get("orderId") or "").strip()
    if order_id:
        if not order_id.isdigit():
            raise ValueError("orderId must be a number")
        query = query.filter(Order.id == int(order_id))

    return query.order_by(Order.order_date.desc(), Order.id.desc()).all()


def whatsapp_message_for(order, lang="fr"):
    cart = Cart()
    for item in order.order_items:
        color = None
        if item.color_id:
            color = {"id": item.color_id, "name_fr": item.color_name_fr, "name_ar": item.color_name_ar}
        cart.add({
            "id": item.product_id,
            "name_fr": item.product_name_fr,
            "name_ar": item.product_name_ar,
            "price": item.price,
        }, item.quantity, color)
    return cart.whatsapp_message(lang, currency=current_app.config["CURRENCY"])


@orders_bp.route('/api/orders', methods=['POST'])
def place_order():
    """
    Place an order (web checkout or WhatsApp)
    ---
    tags:
      - Orders
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - name
            - phone
            - address
            - items
          properties:
            name:
              type: string
              example: "Salma Benali"
            phone:
              type: string
              example: "0612345678"
            address:
              type: string
              example: "12 Rue Atlas, Casablanca"
            notes:
              type: string
            order_source:
              type: string
              enum: [web, whatsapp]
            lang:
              type: string
              enum: [fr, ar]
            items:
              type: array
              items:
                type: object
                properties:
                  product_id:
                    type: integer
                    example: 3
                  quantity:
                    type: integer
                    example: 2
                  color_id:
                    type: integer
    responses:
      201:
        description: Order created
      400:
        description: Invalid input
      404:
        description: Product or color not found
    """
    data = request.get_json(silent=True) or {}

    try:
        order, total, products = create_order(data)
    except CheckoutError as e:
        return jsonify({"message": e.message}), e.status
    except SQLAlchemyError:
        current_app.logger.exception("Error creating order")
        return jsonify({"message": "Error creating order"}), 500

    current_app.logger.info(f"Order {order.id} created ({order.order_source})")
    notify_new_order(order, float(total), products)

    response = serialize_order(order, with_items=True)
    if order.order_source == "whatsapp":
        message = whatsapp_message_for(order, data.get("lang") or "fr")
        response["whatsapp_message"] = message
        response["whatsapp_url"] = whatsapp_url(current_app.config["WHATSAPP_NUMBER"], message)

    return jsonify(response), 201


@orders_bp.route('/api/orders', methods=['GET'])
@admin_required
def list_orders():
    """
    List orders for the admin queue
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - {name: status, in: query, type: string}
      - {name: startDate, in: query, type: string, description: YYYY-MM-DD}
      - {name: endDate, in: query, type: string, description: YYYY-MM-DD (inclusive)}
      - {name: orderId, in: query, type: integer}
      - {name: source, in: query, type: string}
    responses:
      200:
        description: Orders, newest first
      400:
        description: Invalid filter
    """
    try:
        orders = filtered_orders(request.args)
    except ValueError as e:
        return jsonify({"message": str(e)}), 400

    return jsonify([serialize_order(o) for o in orders]), 200


@orders_bp.route('/api/orders/active/count', methods=['GET'])
@admin_required
def active_order_count():
    count = Order.query.filter(Order.status.in_(order_status.ACTIVE_STATUSES)).count()
    return jsonify({"count": count}), 200


@orders_bp.route('/api/orders/stats', methods=['GET'])
@admin_required
def order_stats():
    counts = count_by_status()

    return jsonify({
        "by_status": counts,
        "active": sum(counts[s] for s in order_status.ACTIVE_STATUSES),
        "total": sum(counts.values())
    }), 200


@orders_bp.route('/api/orders/export', methods=['GET'])
@admin_required
def export_orders_download():
    """
    Export orders as a file
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - {name: format, in: query, type: string, enum: [csv, excel, pdf, word], default: excel}
      - {name: status, in: query, type: string}
      - {name: startDate, in: query, type: string}
      - {name: endDate, in: query, type: string}
      - {name: orderId, in: query, type: integer}
      - {name: token, in: query, type: string, description: JWT when no Authorization header is sent}
    produces:
      - application/octet-stream
    responses:
      200:
        description: File download
      400:
        description: Unknown format or invalid filter
    """
    fmt = request.args.get("format", "excel")

    try:
        orders = filtered_orders(request.args)
        buffer, mimetype, filename = export_orders(orders, fmt)
    except (ValueError, UnsupportedFormat) as e:
        return jsonify({"message": str(e)}), 400

    current_app.logger.info(f"Exported {len(orders)} orders as {fmt}")
    return send_file(buffer, mimetype=mimetype, as_attachment=True, download_name=filename)


@orders_bp.route('/api/orders/<int:order_id>', methods=['GET'])
@admin_required
def get_order(order_id):
    order = db.session.get(Order, order_id)
    if not order:
        return jsonify({"message": "Order not found"}), 404

    return jsonify(serialize_order(order, with_items=True)), 200


@orders_bp.route('/api/orders/<int:order_id>/items', methods=['GET'])
@admin_required
def get_order_items(order_id):
    order = db.session.get(Order, order_id)
    if not order:
        return jsonify({"message": "Order not found"}), 404

    return jsonify([serialize_item(i) for i in order.order_items]), 200


@orders_bp.route('/api/orders/<int:order_id>/status', methods=['PUT'])
@admin_required
def update_order_status(order_id):
    """
    Update order status
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    description: >
      pending -> confirmed | cancelled, confirmed -> delivered | cancelled.
      delivered and cancelled are final. Delivery stamps completed_date.
    parameters:
      - name: order_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            status:
              type: string
              example: confirmed
    responses:
      200:
        description: Status updated
      400:
        description: Unknown status
      404:
        description: Order not found
      409:
        description: Transition not allowed
    """
    data = request.get_json(silent=True) or {}
    new_status = data.get("status")

    order = db.session.get(Order, order_id)
    if not order:
        return jsonify({"message": "Order not found"}), 404

    previous = order.status
    try:
        order_status.apply_transition(order, new_status)
        db.session.commit()
    except order_status.InvalidStatus as e:
        return jsonify({"message": str(e)}), 400
    except order_status.InvalidTransition as e:
        current_app.logger.warning(f"Order {order_id}: {e}")
        return jsonify({"message": str(e)}), 409
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Failed to update order {order_id}")
        return jsonify({"message": "Failed to update order status"}), 500

    current_app.logger.info(f"Order {order_id} status {previous} -> {new_status}")
    return jsonify({
        "message": f"Order status updated to {new_status}",
        "order": serialize_order(order)
    }), 200
