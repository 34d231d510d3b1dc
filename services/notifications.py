"""Admin notification channel.

Events are pushed to in-process subscribers and to every Socket.IO client
that authenticated into the ``admins`` room. Delivery is at-most-once: there
is no queue, no replay on reconnect and no acknowledgment. Admins that were
offline find new orders by listing them.
"""
from dataclasses import dataclass, field, asdict

from core.imports import current_app, decode_token, emit, join_room
from core.timeutils import utcnow
from core.extensions import socketio

ADMIN_ROOM = "admins"
NOTIFICATION_EVENT = "notification"


@dataclass
class Notification:
    type: str  # order, stock
    title: str
    message: str
    data: dict = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: utcnow().isoformat() + "Z")

    def to_dict(self):
        return asdict(self)


class NotificationChannel:
    def __init__(self, socketio, room=ADMIN_ROOM, event=NOTIFICATION_EVENT):
        self.socketio = socketio
        self.room = room
        self.event = event
        self._subscribers = []

    def subscribe(self, callback):
        if callback not in self._subscribers:
            self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, notification):
        """Fan out ``notification``; never raises.

        Returns True when the socket emit went through.
        """
        payload = notification.to_dict()

        for callback in list(self._subscribers):
            try:
                callback(notification)
            except Exception:
                current_app.logger.exception(f"Notification subscriber {callback!r} failed")

        try:
            self.socketio.emit(self.event, payload, to=self.room)
        except Exception:
            current_app.logger.exception(f"Could not push '{notification.type}' notification")
            return False
        return True


channel = NotificationChannel(socketio)


def order_notification(order, total):
    source = "WhatsApp" if order.order_source == "whatsapp" else "web"
    return Notification(
        type="order",
        title="New order",
        message=f"Order #{order.id} from {order.name} ({source}): {total:.2f} {current_app.config['CURRENCY']}",
        data={
            "order_id": order.id,
            "name": order.name,
            "phone": order.phone,
            "total": total,
            "order_source": order.order_source,
        },
    )


def stock_notification(product):
    return Notification(
        type="stock",
        title="Low stock",
        message=f"{product.name_fr} has {product.stock} left in stock",
        data={"product_id": product.id, "stock": product.stock},
    )


def notify_new_order(order, total, products=()):
    channel.publish(order_notification(order, total))

    threshold = current_app.config["LOW_STOCK_THRESHOLD"]
    for product in products:
        if product.stock <= threshold:
            channel.publish(stock_notification(product))


@socketio.on("admin:authenticate")
def authenticate_admin(token):
    """Join the admins room when ``token`` is a valid admin JWT."""
    try:
        claims = decode_token(token) if token else None
    except Exception:
        claims = None

    if not claims or claims.get("role") != "admin":
        current_app.logger.warning("Rejected socket admin authentication")
        emit("admin:unauthorized", {"message": "Invalid token"})
        return

    join_room(ADMIN_ROOM)
    emit("admin:authenticated", {"admin_id": claims.get("sub")})
