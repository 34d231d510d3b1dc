import os

from core.extensions import db
from models.bannerModels import Banner


def create_banner(client, auth, image, active="true", **fields):
    data = {"title_fr": "Soldes", "title_ar": "تخفيضات", "subtitle_fr": "-30%", "subtitle_ar": "٣٠٪",
            "active": active, "image": image()}
    data.update(fields)
    return client.post('/api/banners', data=data, headers=auth, content_type='multipart/form-data')


def test_public_listing_shows_only_active(client, auth, image):
    create_banner(client, auth, image, active="true", title_fr="Visible")
    create_banner(client, auth, image, active="false", title_fr="Hidden")

    public = client.get('/api/banners').get_json()
    assert [b["title_fr"] for b in public] == ["Visible"]

    everything = client.get('/api/banners/all', headers=auth).get_json()
    assert {b["title_fr"] for b in everything} == {"Visible", "Hidden"}


def test_create_requires_image(client, auth):
    res = client.post('/api/banners', data={"title_fr": "x"}, headers=auth, content_type='multipart/form-data')
    assert res.status_code == 400
    assert res.get_json()["message"] == "Please upload an image"


def test_get_banner(client, auth, image):
    banner = create_banner(client, auth, image).get_json()
    res = client.get(f'/api/banners/{banner["id"]}', headers=auth)
    assert res.status_code == 200
    assert res.get_json()["active"] is True
    assert client.get('/api/banners/999', headers=auth).status_code == 404


def test_update_swaps_image_and_flag(client, auth, image, uploaded):
    banner = create_banner(client, auth, image).get_json()
    old_file = uploaded(banner["image"])

    res = client.put(f'/api/banners/{banner["id"]}', headers=auth, content_type='multipart/form-data',
                     data={"active": "false", "title_fr": "Nouveau", "image": image("new.webp")})
    assert res.status_code == 200
    body = res.get_json()
    assert body["active"] is False
    assert body["title_fr"] == "Nouveau"
    assert body["title_ar"] == "تخفيضات"
    assert not os.path.exists(old_file)
    assert os.path.exists(uploaded(body["image"]))


def test_update_without_image_keeps_file(client, auth, image, uploaded):
    banner = create_banner(client, auth, image).get_json()
    res = client.put(f'/api/banners/{banner["id"]}', headers=auth, content_type='multipart/form-data',
                     data={"subtitle_fr": "-50%"})
    assert res.get_json()["image"] == banner["image"]
    assert os.path.exists(uploaded(banner["image"]))


def test_delete_removes_file(client, auth, image, uploaded):
    banner = create_banner(client, auth, image).get_json()
    path = uploaded(banner["image"])

    res = client.delete(f'/api/banners/{banner["id"]}', headers=auth)
    assert res.status_code == 200
    assert not os.path.exists(path)
    assert db.session.get(Banner, banner["id"]) is None
    assert client.delete(f'/api/banners/{banner["id"]}', headers=auth).status_code == 404
