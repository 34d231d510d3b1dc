from core.imports import jsonify, Flask, send_from_directory, os
from core.config import Config
from core.extensions import db, jwt, swagger, cors, bcrypt, migrate, socketio
from core.logger import configure_logging
from core.security import register_jwt_handlers
from routes.auth import auth_bp, seed_admin
from routes.admin import admin_bp
from routes.products import products_bp
from routes.banners import banners_bp
from routes.orders import orders_bp
from routes.cart import cart_bp
from models.productModels import Product, ProductColor
from services.pricing import to_decimal
import services.notifications  # noqa: F401  registers socket handlers


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"message": "Method not allowed"}), 405

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"message": "File is too large"}), 413

    @app.errorhandler(500)
    def server_error(e):
        app.logger.error(f"Unhandled error: {e}")
        return jsonify({"message": "Server error"}), 500


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)

    db.init_app(app)
    jwt.init_app(app)
    swagger.init_app(app)
    cors.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)
    socketio.init_app(app)

    register_jwt_handlers(jwt)
    register_error_handlers(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(banners_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(cart_bp)

    @app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)

    @app.route('/ping')
    def ping():
        return "Ping received", 200

    return app


def seed_products():
    if Product.query.first():
        print("ℹ️ Products already exist.")
        return

    sample_products = [
        {
            "name_fr": "Sac à main cuir",
            "name_ar": "حقيبة يد جلدية",
            "desc_fr": "Sac en cuir véritable, fermeture zippée.",
            "desc_ar": "حقيبة من الجلد الطبيعي بسحاب.",
            "price": "450.00",
            "discount": "10",
            "category": "bags",
            "colors": [
                {"name_fr": "Noir", "name_ar": "أسود", "hex_code": "#000000", "stock": 6},
                {"name_fr": "Camel", "name_ar": "بني فاتح", "hex_code": "#C19A6B", "stock": 4},
            ],
        },
        {
            "name_fr": "Eau de parfum Rose",
            "name_ar": "عطر الورد",
            "desc_fr": "Notes florales de rose de Damas, 100 ml.",
            "desc_ar": "نفحات زهرية من الورد الدمشقي، 100 مل.",
            "price": "320.00",
            "discount": "0",
            "category": "perfumes",
            "stock": 15,
        },
        {
            "name_fr": "Portefeuille compact",
            "name_ar": "محفظة صغيرة",
            "desc_fr": "Portefeuille pliable avec porte-cartes.",
            "desc_ar": "محفظة قابلة للطي مع حامل بطاقات.",
            "price": "120.00",
            "discount": "25",
            "category": "wallets",
            "stock": 3,
        },
    ]

    for data in sample_products:
        colors = data.pop("colors", [])
        product = Product(
            name_fr=data["name_fr"],
            name_ar=data["name_ar"],
            desc_fr=data["desc_fr"],
            desc_ar=data["desc_ar"],
            price=to_decimal(data["price"]),
            discount=to_decimal(data["discount"]),
            category=data["category"],
            stock=data.get("stock", 0),
        )
        for color in colors:
            product.colors.append(ProductColor(**color))
        if product.colors:
            product.stock = sum(c.stock for c in product.colors)
        db.session.add(product)
        print(f"✅ Product added: {data['name_fr']}")
    db.session.commit()


app = create_app()

if __name__ == "__main__":
    with app.app_context():
        os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)
        db.create_all()

        seed_admin()
        seed_products()

    socketio.run(app, debug=True)
