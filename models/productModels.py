from core.extensions import db
from core.timeutils import utcnow

CATEGORIES = ("bags", "perfumes", "cosmetics", "wallets", "accessories")


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name_fr = db.Column(db.String(255), nullable=False)
    name_ar = db.Column(db.String(255), nullable=False)
    desc_fr = db.Column(db.Text, default="")
    desc_ar = db.Column(db.Text, default="")
    price = db.Column(db.Numeric(10, 2), nullable=False)
    discount = db.Column(db.Numeric(5, 2), default=0, nullable=False)  # percent
    category = db.Column(db.String(50), nullable=False, index=True)
    stock = db.Column(db.Integer, default=0, nullable=False)
    image = db.Column(db.String(500), nullable=True)  # /uploads/<file>
    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    colors = db.relationship(
        "ProductColor",
        backref="product",
        cascade="all, delete-orphan",
        order_by="ProductColor.id",
    )


class ProductColor(db.Model):
    __tablename__ = "product_colors"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    name_fr = db.Column(db.String(100), nullable=False)
    name_ar = db.Column(db.String(100), nullable=False)
    hex_code = db.Column(db.String(7), default="#000000", nullable=False)
    stock = db.Column(db.Integer, default=0, nullable=False)
    image = db.Column(db.String(500), nullable=True)
