from core.imports import Blueprint, jsonify, request, current_app, SQLAlchemyError
from core.extensions import db
from core.security import admin_required
from models.bannerModels import Banner
from services.uploads import save_upload, delete_upload, UploadError

banners_bp = Blueprint('banners', __name__)

BANNER_FIELDS = ("title_fr", "title_ar", "subtitle_fr", "subtitle_ar")


def serialize_banner(banner):
    return {
        "id": banner.id,
        "title_fr": banner.title_fr,
        "title_ar": banner.title_ar,
        "subtitle_fr": banner.subtitle_fr,
        "subtitle_ar": banner.subtitle_ar,
        "image": banner.image,
        "active": banner.active,
        "created_at": banner.created_at.isoformat() if banner.created_at else None
    }


def parse_active(value):
    # multipart forms send booleans as strings
    return value is True or str(value).lower() == "true"


@banners_bp.route('/api/banners', methods=['GET'])
def active_banners():
    """
    Get all active banners
    ---
    tags:
      - Banners
    responses:
      200:
        description: Active banners, newest first
    """
    banners = Banner.query.filter_by(active=True).order_by(Banner.created_at.desc(), Banner.id.desc()).all()
    return jsonify([serialize_banner(b) for b in banners]), 200


@banners_bp.route('/api/banners/all', methods=['GET'])
@admin_required
def all_banners():
    banners = Banner.query.order_by(Banner.created_at.desc(), Banner.id.desc()).all()
    return jsonify([serialize_banner(b) for b in banners]), 200


@banners_bp.route('/api/banners/<int:banner_id>', methods=['GET'])
@admin_required
def get_banner(banner_id):
    banner = db.session.get(Banner, banner_id)
    if not banner:
        return jsonify({"message": "Banner not found"}), 404

    return jsonify(serialize_banner(banner)), 200


@banners_bp.route('/api/banners', methods=['POST'])
@admin_required
def create_banner():
    """
    Create a banner
    ---
    tags:
      - Banners
    security:
      - Bearer: []
    consumes:
      - multipart/form-data
    parameters:
      - {name: image, in: formData, type: file, required: true}
      - {name: title_fr, in: formData, type: string}
      - {name: title_ar, in: formData, type: string}
      - {name: subtitle_fr, in: formData, type: string}
      - {name: subtitle_ar, in: formData, type: string}
      - {name: active, in: formData, type: boolean}
    responses:
      201:
        description: Banner created
      400:
        description: Missing or invalid image
    """
    image_file = request.files.get("image")
    if not image_file or not image_file.filename:
        return jsonify({"message": "Please upload an image"}), 400

    try:
        image = save_upload(image_file, prefix="banner_")
    except UploadError as e:
        return jsonify({"message": str(e)}), 400

    banner = Banner(image=image, active=parse_active(request.form.get("active")))
    for field in BANNER_FIELDS:
        setattr(banner, field, request.form.get(field))

    try:
        db.session.add(banner)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        delete_upload(image)
        current_app.logger.exception("Failed to create banner")
        return jsonify({"message": "Failed to create banner"}), 500

    current_app.logger.info(f"Banner {banner.id} created")
    return jsonify(serialize_banner(banner)), 201


@banners_bp.route('/api/banners/<int:banner_id>', methods=['PUT'])
@admin_required
def update_banner(banner_id):
    banner = db.session.get(Banner, banner_id)
    if not banner:
        return jsonify({"message": "Banner not found"}), 404

    new_image = None
    image_file = request.files.get("image")
    if image_file and image_file.filename:
        try:
            new_image = save_upload(image_file, prefix="banner_")
        except UploadError as e:
            return jsonify({"message": str(e)}), 400

    old_image = banner.image
    for field in BANNER_FIELDS:
        if field in request.form:
            setattr(banner, field, request.form.get(field))
    if "active" in request.form:
        banner.active = parse_active(request.form.get("active"))
    if new_image:
        banner.image = new_image

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        if new_image:
            delete_upload(new_image)
        current_app.logger.exception(f"Failed to update banner {banner_id}")
        return jsonify({"message": "Failed to update banner"}), 500

    if new_image and old_image:
        delete_upload(old_image)

    return jsonify(serialize_banner(banner)), 200


@banners_bp.route('/api/banners/<int:banner_id>', methods=['DELETE'])
@admin_required
def delete_banner(banner_id):
    banner = db.session.get(Banner, banner_id)
    if not banner:
        return jsonify({"message": "Banner not found"}), 404

    image = banner.image
    try:
        db.session.delete(banner)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"Failed to delete banner {banner_id}")
        return jsonify({"message": "Failed to delete banner"}), 500

    delete_upload(image)
    current_app.logger.info(f"Banner {banner_id} deleted")
    return jsonify({"message": "Banner removed"}), 200
