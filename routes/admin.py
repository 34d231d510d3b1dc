from core.imports import Blueprint, jsonify, current_app
from core.security import admin_required
from models.productModels import Product
from models.bannerModels import Banner
from services import order_status
from routes.orders import count_by_status

admin_bp = Blueprint('admin', __name__)


# =========================
# /api/admin/stats (GET)
# =========================
@admin_bp.route('/api/admin/stats', methods=['GET'])
@admin_required
def get_admin_stats():
    """
    Admin: Get dashboard statistics
    ---
    tags:
      - Admin
    summary: Get dashboard statistics (Admin only)
    description: Returns product, banner and order counts.
    security:
      - Bearer: []
    responses:
      200:
        description: Dashboard stats
        schema:
          type: object
          properties:
            products: { type: integer, example: 42 }
            low_stock: { type: integer, example: 3 }
            banners:
              type: object
              properties:
                total: { type: integer, example: 5 }
                active: { type: integer, example: 3 }
            orders:
              type: object
              properties:
                pending: { type: integer, example: 4 }
                confirmed: { type: integer, example: 2 }
                delivered: { type: integer, example: 30 }
                cancelled: { type: integer, example: 1 }
            active_orders: { type: integer, example: 6 }
      401:
        description: Missing or invalid token
      403:
        description: Forbidden (not admin)
    """
    orders_by_status = count_by_status()

    threshold = current_app.config["LOW_STOCK_THRESHOLD"]

    return jsonify({
        "products": Product.query.count(),
        "low_stock": Product.query.filter(Product.stock <= threshold).count(),
        "banners": {
            "total": Banner.query.count(),
            "active": Banner.query.filter_by(active=True).count()
        },
        "orders": orders_by_status,
        "active_orders": sum(orders_by_status[s] for s in order_status.ACTIVE_STATUSES)
    }), 200
