import json
import os

from core.extensions import db
from models.productModels import Product, ProductColor


def product_form(image=None, **overrides):
    form = {
        "name_fr": "Sac cabas",
        "name_ar": "حقيبة تسوق",
        "desc_fr": "Grand sac en toile",
        "desc_ar": "حقيبة كبيرة",
        "price": "250.00",
        "discount": "20",
        "category": "bags",
        "stock": "8",
    }
    form.update(overrides)
    if image is not None:
        form["image"] = image
    return form


def test_create_product_with_colors(client, auth, image, uploaded):
    form = product_form(image=image())
    form["colors"] = json.dumps([
        {"name_fr": "Noir", "name_ar": "أسود", "hex_code": "#000000", "stock": 3},
        {"name_fr": "Beige", "name_ar": "بيج", "hex_code": "#F5F5DC", "stock": 4},
    ])
    form["colorImage_1"] = image("beige.jpg")

    res = client.post('/api/products', data=form, headers=auth, content_type='multipart/form-data')
    assert res.status_code == 201
    body = res.get_json()

    assert body["final_price"] == 200.0
    assert body["image"].startswith("/uploads/")
    assert os.path.exists(uploaded(body["image"]))
    assert [c["name_fr"] for c in body["colors"]] == ["Noir", "Beige"]
    assert body["colors"][0]["image"] is None
    assert os.path.exists(uploaded(body["colors"][1]["image"]))
    # per-color stock drives product stock
    assert body["stock"] == 7


def test_create_product_requires_image(client, auth):
    res = client.post('/api/products', data=product_form(), headers=auth, content_type='multipart/form-data')
    assert res.status_code == 400
    assert res.get_json()["message"] == "Please upload an image"
    assert Product.query.count() == 0


def test_create_product_validates_fields(client, auth, image):
    bad = [
        product_form(image=image(), price="abc"),
        product_form(image=image(), price="NaN"),
        product_form(image=image(), price="Infinity"),
        product_form(image=image(), discount="nan"),
        product_form(image=image(), discount="-Infinity"),
        product_form(image=image(), discount="150"),
        product_form(image=image(), category="shoes"),
        product_form(image=image(), name_ar=""),
        product_form(image=image("virus.exe")),
        product_form(image=image(), colors=json.dumps([{"name_fr": "Noir", "name_ar": "أسود", "hex_code": "black"}])),
    ]
    for form in bad:
        res = client.post('/api/products', data=form, headers=auth, content_type='multipart/form-data')
        assert res.status_code == 400, form
    assert Product.query.count() == 0


def test_create_product_requires_admin(client, image):
    res = client.post('/api/products', data=product_form(image=image()), content_type='multipart/form-data')
    assert res.status_code == 401


def test_listing_and_sorting(client, make_product):
    make_product(name="Beta", price="100", discount="50")   # 50.00
    make_product(name="Alpha", price="80", discount="0")    # 80.00
    make_product(name="Gamma", price="60", discount="10")   # 54.00

    def names(sort):
        return [p["name_fr"] for p in client.get(f'/api/products?sort={sort}').get_json()]

    assert names("price_asc") == ["Beta", "Gamma", "Alpha"]
    assert names("price_desc") == ["Alpha", "Gamma", "Beta"]
    assert names("discount") == ["Beta", "Gamma", "Alpha"]
    assert names("name_asc") == ["Alpha", "Beta", "Gamma"]
    assert names("name_desc") == ["Gamma", "Beta", "Alpha"]
    assert len(names("bogus")) == 3


def test_category_and_discounted(client, make_product):
    make_product(name="Sac", category="bags", discount="15")
    make_product(name="Parfum", category="perfumes", discount="0")
    make_product(name="Rouge", category="cosmetics", discount="30")

    bags = client.get('/api/products/category/bags').get_json()
    assert [p["name_fr"] for p in bags] == ["Sac"]

    deals = client.get('/api/products/discounted').get_json()
    assert [p["name_fr"] for p in deals] == ["Rouge", "Sac"]


def test_search_matches_both_languages(client, make_product):
    make_product(name="Sac bandoulière", name_ar="حقيبة كتف")
    make_product(name="Parfum oud", name_ar="عطر العود", category="perfumes")

    res = client.get('/api/products/search?q=BANDOUL')
    assert [p["name_fr"] for p in res.get_json()] == ["Sac bandoulière"]

    res = client.get('/api/products/search?q=العود')
    assert [p["name_fr"] for p in res.get_json()] == ["Parfum oud"]

    assert client.get('/api/products/search?q=').status_code == 400


def test_product_details_and_colors(client, make_product):
    product = make_product(colors=[{"name_fr": "Noir", "name_ar": "أسود", "hex_code": "#000000", "stock": 2}])

    res = client.get(f'/api/products/{product.id}')
    assert res.status_code == 200
    assert res.get_json()["colors"][0]["hex_code"] == "#000000"

    colors = client.get(f'/api/products/{product.id}/colors').get_json()
    assert len(colors) == 1

    assert client.get('/api/products/999').status_code == 404
    assert client.get('/api/products/999/colors').status_code == 404


def test_displayed_price_is_rounded(client, make_product):
    product = make_product(price="99.99", discount="15")
    body = client.get(f'/api/products/{product.id}').get_json()
    assert body["price"] == 99.99
    assert body["final_price"] == 84.99


def test_update_replaces_image_and_syncs_colors(client, auth, image, uploaded):
    form = product_form(image=image())
    form["colors"] = json.dumps([
        {"name_fr": "Noir", "name_ar": "أسود", "hex_code": "#000000", "stock": 3},
        {"name_fr": "Rouge", "name_ar": "أحمر", "hex_code": "#FF0000", "stock": 1},
    ])
    form["colorImage_1"] = image("rouge.png")
    created = client.post('/api/products', data=form, headers=auth, content_type='multipart/form-data').get_json()
    old_image = uploaded(created["image"])
    red = created["colors"][1]
    red_image = uploaded(red["image"])
    black = created["colors"][0]

    update = {
        "price": "300",
        "image": image("new.png"),
        "colors": json.dumps([
            {"id": black["id"], "name_fr": "Noir mat", "name_ar": "أسود", "hex_code": "#111111", "stock": 5},
            {"name_fr": "Blanc", "name_ar": "أبيض", "hex_code": "#FFFFFF", "stock": 2},
        ]),
    }
    res = client.put(f'/api/products/{created["id"]}', data=update, headers=auth, content_type='multipart/form-data')
    assert res.status_code == 200
    body = res.get_json()

    assert body["price"] == 300.0
    assert body["name_fr"] == "Sac cabas"
    assert not os.path.exists(old_image)
    assert os.path.exists(uploaded(body["image"]))
    assert not os.path.exists(red_image)
    assert [c["name_fr"] for c in body["colors"]] == ["Noir mat", "Blanc"]
    assert body["colors"][0]["id"] == black["id"]
    assert body["stock"] == 7
    assert db.session.get(ProductColor, red["id"]) is None


def test_partial_update_keeps_stock_equal_to_color_stock(client, auth, make_product):
    product = make_product(stock=5, colors=[
        {"name_fr": "Noir", "name_ar": "أسود", "hex_code": "#000000", "stock": 2},
        {"name_fr": "Rouge", "name_ar": "أحمر", "hex_code": "#FF0000", "stock": 3},
    ])

    res = client.put(f'/api/products/{product.id}', data={"stock": "99"}, headers=auth, content_type='multipart/form-data')
    assert res.status_code == 200
    assert res.get_json()["stock"] == 5
    assert db.session.get(Product, product.id).stock == 5


def test_update_missing_product(client, auth):
    res = client.put('/api/products/42', data={"price": "1"}, headers=auth, content_type='multipart/form-data')
    assert res.status_code == 404


def test_delete_removes_product_and_files(client, auth, image, uploaded):
    form = product_form(image=image())
    form["colors"] = json.dumps([{"name_fr": "Noir", "name_ar": "أسود", "hex_code": "#000000", "stock": 3}])
    form["colorImage_0"] = image("noir.png")
    created = client.post('/api/products', data=form, headers=auth, content_type='multipart/form-data').get_json()
    files = [uploaded(created["image"]), uploaded(created["colors"][0]["image"])]
    assert all(os.path.exists(f) for f in files)

    res = client.delete(f'/api/products/{created["id"]}', headers=auth)
    assert res.status_code == 200
    assert not any(os.path.exists(f) for f in files)
    assert db.session.get(Product, created["id"]) is None
    assert ProductColor.query.count() == 0

    assert client.delete(f'/api/products/{created["id"]}', headers=auth).status_code == 404


def test_uploaded_file_is_served(client, auth, image):
    created = client.post('/api/products', data=product_form(image=image(content=b"pixels")), headers=auth,
                          content_type='multipart/form-data').get_json()
    res = client.get(created["image"])
    assert res.status_code == 200
    assert res.data == b"pixels"
