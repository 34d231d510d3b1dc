from core.imports import Blueprint, jsonify, request, create_access_token, get_jwt_identity, current_app
from core.extensions import db, bcrypt
from core.security import admin_required
from models.userModel import Admins

auth_bp = Blueprint('auth', __name__)


def seed_admin():
    username = current_app.config["ADMIN_USERNAME"]
    admin = Admins.query.filter_by(username=username).first()
    if not admin:
        raw_password = current_app.config["ADMIN_PASSWORD"]
        hashed_password = bcrypt.generate_password_hash(raw_password).decode('utf-8')

        admin = Admins(username=username, password=hashed_password)
        db.session.add(admin)
        db.session.commit()

        print(f"✅ Admin account created (username={username})")
    else:
        print("ℹ️ Admin account already exists.")
    return admin


@auth_bp.route('/api/auth/login', methods=['POST'])
def login():
    """
    Admin login
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - username
            - password
          properties:
            username:
              type: string
              example: admin
            password:
              type: string
              example: admin123
    responses:
      200:
        description: Token issued
      400:
        description: Missing username or password
      401:
        description: Invalid credentials
    """
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')

    if not username or not password:
        return jsonify({"message": "Username and password are required"}), 400

    admin = Admins.query.filter_by(username=username).first()
    if not admin or not bcrypt.check_password_hash(admin.password, password):
        current_app.logger.warning(f"Failed login attempt for '{username}'")
        return jsonify({"message": "Invalid credentials"}), 401

    token = create_access_token(
        identity=str(admin.id),
        additional_claims={"role": "admin"}
    )

    return jsonify({
        "message": "Login successful",
        "token": token,
        "admin": {"id": admin.id, "username": admin.username}
    }), 200


@auth_bp.route('/api/auth', methods=['GET'])
@admin_required
def current_admin():
    """
    Get the logged-in admin
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Admin details
      401:
        description: Missing or invalid token
      404:
        description: Admin not found
    """
    admin = db.session.get(Admins, int(get_jwt_identity()))
    if not admin:
        return jsonify({"message": "Admin not found"}), 404

    return jsonify({"id": admin.id, "username": admin.username}), 200
