from core.extensions import db
from core.timeutils import utcnow

ORDER_SOURCES = ("web", "whatsapp")


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    address = db.Column(db.Text, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), default="pending", nullable=False, index=True)  # pending, confirmed, delivered, cancelled
    order_source = db.Column(db.String(20), default="web", nullable=False)  # web, whatsapp
    order_date = db.Column(db.DateTime, default=utcnow, index=True)
    completed_date = db.Column(db.DateTime, nullable=True)

    order_items = db.relationship(
        "OrderItem",
        backref="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    color_id = db.Column(db.Integer, db.ForeignKey("product_colors.id", ondelete="SET NULL"), nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)  # unit price at purchase, discount applied

    # snapshots, so history survives catalog edits and deletions
    product_name_fr = db.Column(db.String(255), nullable=False)
    product_name_ar = db.Column(db.String(255), nullable=False)
    color_name_fr = db.Column(db.String(100), nullable=True)
    color_name_ar = db.Column(db.String(100), nullable=True)
    color_hex = db.Column(db.String(7), nullable=True)

    product = db.relationship("Product")
    color = db.relationship("ProductColor")
