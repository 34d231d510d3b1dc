import io
import os

import pytest

from main import create_app
from core.config import TestingConfig
from core.extensions import db
from models.productModels import Product, ProductColor
from routes.auth import seed_admin
from services.pricing import to_decimal


@pytest.fixture
def app(tmp_path):
    app = create_app(TestingConfig)
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")
    os.makedirs(app.config["UPLOAD_FOLDER"])

    with app.app_context():
        db.create_all()
        seed_admin()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def token(client):
    res = client.post('/api/auth/login', json={"username": "admin", "password": "admin123"})
    assert res.status_code == 200
    return res.get_json()["token"]


@pytest.fixture
def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def image():
    def _image(name="photo.png", content=b"\x89PNG fake image"):
        return (io.BytesIO(content), name)
    return _image


@pytest.fixture
def uploaded(app):
    """Absolute path on disk for a public /uploads/ path."""
    def _path(public_path):
        return os.path.join(app.config["UPLOAD_FOLDER"], public_path.rsplit("/", 1)[1])
    return _path


@pytest.fixture
def make_product():
    def _make(name="Sac", price="100.00", discount="0", category="bags", stock=10, colors=None, **extra):
        product = Product(
            name_fr=name,
            name_ar=extra.pop("name_ar", "حقيبة"),
            desc_fr=extra.pop("desc_fr", ""),
            desc_ar=extra.pop("desc_ar", ""),
            price=to_decimal(price),
            discount=to_decimal(discount),
            category=category,
            stock=stock,
            **extra
        )
        for color in colors or []:
            product.colors.append(ProductColor(**color))
        db.session.add(product)
        db.session.commit()
        return product
    return _make
