from core.imports import Blueprint, jsonify, request, current_app, json, or_, SQLAlchemyError
from core.extensions import db
from core.security import admin_required
from models.productModels import Product, ProductColor, CATEGORIES
from services.pricing import as_float, effective_price, to_decimal
from services.uploads import save_upload, delete_upload, UploadError
import re

products_bp = Blueprint('products', __name__)

HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
SORT_OPTIONS = ("newest", "price_asc", "price_desc", "discount", "name_asc", "name_desc")


def serialize_color(color):
    return {
        "id": color.id,
        "product_id": color.product_id,
        "name_fr": color.name_fr,
        "name_ar": color.name_ar,
        "hex_code": color.hex_code,
        "stock": color.stock,
        "image": color.image
    }


def serialize_product(product, with_colors=True):
    data = {
        "id": product.id,
        "name_fr": product.name_fr,
        "name_ar": product.name_ar,
        "desc_fr": product.desc_fr,
        "desc_ar": product.desc_ar,
        "price": as_float(product.price),
        "discount": float(product.discount or 0),
        "final_price": as_float(effective_price(product.price, product.discount)),
        "category": product.category,
        "stock": product.stock,
        "image": product.image,
        "created_at": product.created_at.isoformat() if product.created_at else None
    }
    if with_colors:
        data["colors"] = [serialize_color(c) for c in product.colors]
    return data


def apply_sort(query, sort):
    final_price = Product.price * (1 - Product.discount / 100)

    if sort == "price_asc":
        return query.order_by(final_price.asc(), Product.id.desc())
    if sort == "price_desc":
        return query.order_by(final_price.desc(), Product.id.desc())
    if sort == "discount":
        return query.order_by(Product.discount.desc(), Product.created_at.desc())
    if sort == "name_asc":
        return query.order_by(Product.name_fr.asc())
    if sort == "name_desc":
        return query.order_by(Product.name_fr.desc())
    return query.order_by(Product.created_at.desc(), Product.id.desc())


def sort_param(default="newest"):
    sort = request.args.get("sort", default)
    return sort if sort in SORT_OPTIONS else default


def _parse_int(value, field, minimum=0):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be an integer")
    if number < minimum:
        raise ValueError(f"{field} must be at least {minimum}")
    return number


def _parse_price(value):
    if value in (None, ""):
        raise ValueError("price is required")
    try:
        price = to_decimal(value)
    except ArithmeticError:
        raise ValueError("price must be a number")
    if not price.is_finite():
        raise ValueError("price must be a number")
    if price < 0:
        raise ValueError("price must not be negative")
    return price


def _parse_discount(value):
    if value in (None, ""):
        return to_decimal(0)
    try:
        discount = to_decimal(value)
    except ArithmeticError:
        raise ValueError("discount must be a number")
    if not discount.is_finite():
        raise ValueError("discount must be a number")
    if discount < 0 or discount > 100:
        raise ValueError("discount must be between 0 and 100")
    return discount


def _parse_category(value):
    if value not in CATEGORIES:
        raise ValueError(f"category must be one of: {', '.join(CATEGORIES)}")
    return value


def parse_colors(raw):
    """Decode the ``colors`` form field; None means the field was not sent."""
    if raw is None:
        return None
    if raw == "":
        return []
    try:
        colors = json.loads(raw)
    except ValueError:
        raise ValueError("colors must be a JSON list")
    if not isinstance(colors, list) or not all(isinstance(c, dict) for c in colors):
        raise ValueError("colors must be a JSON list")

    for color in colors:
        if not color.get("name_fr") or not color.get("name_ar"):
            raise ValueError("each color needs name_fr and name_ar")
        hex_code = color.get("hex_code") or "#000000"
        if not HEX_COLOR.match(hex_code):
            raise ValueError(f"invalid hex_code '{hex_code}'")
        color["hex_code"] = hex_code
        color["stock"] = _parse_int(color.get("stock", 0), "color stock")
    return colors


def apply_product_fields(product, form, partial):
    text_fields = ("name_fr", "name_ar", "desc_fr", "desc_ar")
    for field in text_fields:
        if field in form:
            setattr(product, field, form[field].strip())

    if not partial:
        missing = [f for f in ("name_fr", "name_ar", "price", "category") if not form.get(f)]
        if missing:
            raise ValueError(f"Missing required fields: {', '.join(missing)}")

    if "price" in form:
        product.price = _parse_price(form["price"])
    if "discount" in form or not partial:
        product.discount = _parse_discount(form.get("discount"))
    if "category" in form:
        product.category = _parse_category(form["category"])
    if "stock" in form:
        product.stock = _parse_int(form["stock"] or 0, "stock")


def sync_colors(product, colors, files, new_files, stale_files):
    """Make ``product.colors`` match ``colors``; the list is authoritative."""
    existing = {c.id: c for c in product.colors}
    kept = set()

    for index, data in enumerate(colors):
        color_id = data.get("id")
        try:
            color_id = int(color_id) if color_id not in (None, "") else None
        except (TypeError, ValueError):
            color_id = None

        color = existing.get(color_id)
        if color is None:
            color = ProductColor()
            product.colors.append(color)
        else:
            kept.add(color.id)

        color.name_fr = data["name_fr"]
        color.name_ar = data["name_ar"]
        color.hex_code = data["hex_code"]
        color.stock = data["stock"]

        image_file = files.get(f"colorImage_{index}")
        if image_file and image_file.filename:
            path = save_upload(image_file, prefix="color_")
            new_files.append(path)
            if color.image:
                stale_files.append(color.image)
            color.image = path

    for color_id, color in existing.items():
        if color_id not in kept:
            if color.image:
                stale_files.append(color.image)
            product.colors.remove(color)

    if product.colors:
        product.stock = sum(c.stock for c in product.colors)


def _save_product(product, partial):
    """Shared create/update flow. Files are only removed once the commit lands."""
    new_files = []
    stale_files = []
    try:
        apply_product_fields(product, request.form, partial)
        colors = parse_colors(request.form.get("colors"))

        image_file = request.files.get("image")
        if image_file and image_file.filename:
            path = save_upload(image_file, prefix="product_")
            new_files.append(path)
            if product.image:
                stale_files.append(product.image)
            product.image = path
        elif not partial:
            raise ValueError("Please upload an image")

        if colors is not None:
            sync_colors(product, colors, request.files, new_files, stale_files)
        elif product.colors:
            product.stock = sum(c.stock for c in product.colors)

        if product.id is None:
            db.session.add(product)
        db.session.commit()

    except (ValueError, UploadError) as e:
        db.session.rollback()
        for path in new_files:
            delete_upload(path)
        return jsonify({"message": str(e)}), 400
    except SQLAlchemyError:
        db.session.rollback()
        for path in new_files:
            delete_upload(path)
        current_app.logger.exception("Failed to save product")
        return jsonify({"message": "Failed to save product"}), 500

    for path in stale_files:
        delete_upload(path)
    return None


@products_bp.route('/api/products', methods=['GET'])
def list_products():
    """
    List all products
    ---
    tags:
      - Products
    parameters:
      - name: sort
        in: query
        type: string
        enum: [newest, price_asc, price_desc, discount, name_asc, name_desc]
        default: newest
    responses:
      200:
        description: List of products
    """
    products = apply_sort(Product.query, sort_param()).all()
    return jsonify([serialize_product(p) for p in products]), 200


@products_bp.route('/api/products/category/<string:category>', methods=['GET'])
def products_by_category(category):
    products = apply_sort(Product.query.filter_by(category=category), sort_param()).all()
    return jsonify([serialize_product(p) for p in products]), 200


@products_bp.route('/api/products/discounted', methods=['GET'])
def discounted_products():
    """
    List products with a discount (hot deals)
    ---
    tags:
      - Products
    parameters:
      - name: sort
        in: query
        type: string
        default: discount
    responses:
      200:
        description: Discounted products, biggest discount first by default
    """
    query = Product.query.filter(Product.discount > 0)
    products = apply_sort(query, sort_param(default="discount")).all()
    return jsonify([serialize_product(p) for p in products]), 200


@products_bp.route('/api/products/search', methods=['GET'])
def search_products():
    q = (request.args.get("q") or "").strip()
    if not q:
        return jsonify({"message": "Search query is required"}), 400

    pattern = f"%{q}%"
    query = Product.query.filter(or_(
        Product.name_fr.ilike(pattern),
        Product.name_ar.ilike(pattern),
        Product.desc_fr.ilike(pattern),
        Product.desc_ar.ilike(pattern),
    ))
    products = apply_sort(query, sort_param()).all()
    return jsonify([serialize_product(p) for p in products]), 200


@products_bp.route('/api/products/<int:product_id>', methods=['GET'])
def product_details(product_id):
    """
    Get a product with its colors
    ---
    tags:
      - Products
    parameters:
      - name: product_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Product details
      404:
        description: Product not found
    """
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({"message": "Product not found"}), 404

    return jsonify(serialize_product(product)), 200


@products_bp.route('/api/products/<int:product_id>/colors', methods=['GET'])
def product_colors(product_id):
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({"message": "Product not found"}), 404

    return jsonify([serialize_color(c) for c in product.colors]), 200


@products_bp.route('/api/products', methods=['POST'])
@admin_required
def create_product():
    """
    Create a product
    ---
    tags:
      - Products
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - {name: name_fr, in: formData, type: string, required: true}
      - {name: name_ar, in: formData, type: string, required: true}
      - {name: desc_fr, in: formData, type: string}
      - {name: desc_ar, in: formData, type: string}
      - {name: price, in: formData, type: number, required: true}
      - {name: discount, in: formData, type: number}
      - {name: category, in: formData, type: string, required: true}
      - {name: stock, in: formData, type: integer}
      - {name: image, in: formData, type: file, required: true}
      - name: colors
        in: formData
        type: string
        description: JSON list of {name_fr, name_ar, hex_code, stock}; images as colorImage_<index>
    responses:
      201:
        description: Product created
      400:
        description: Invalid input
    """
    product = Product()
    error = _save_product(product, partial=False)
    if error:
        return error

    current_app.logger.info(f"Product {product.id} created")
    return jsonify(serialize_product(product)), 201


@products_bp.route('/api/products/<int:product_id>', methods=['PUT'])
@admin_required
def update_product(product_id):
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({"message": "Product not found"}), 404

    error = _save_product(product, partial=True)
    if error:
        return error

    current_app.logger.info(f"Product {product.id} updated")
    return jsonify(serialize_product(product)), 200


@products_bp.route('/api/products/<int:product_id>', methods=['DELETE'])
@admin_required
def delete_product(product_id):
    """Deletes a product, its colors and every image file they own."""
    product = db.session.get(Product, product_id)
    if not product:
        return jsonify({"message": "Product not found"}), 404

    images = [product.image] + [c.image for c in product.colors]

    try:
        db.session.delete(product)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Failed to delete product {product_id}")
        return jsonify({"message": "Failed to delete product"}), 500

    for path in images:
        if path:
            delete_upload(path)

    current_app.logger.info(f"Product {product_id} deleted")
    return jsonify({"message": "Product removed"}), 200
