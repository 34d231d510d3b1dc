from core.extensions import db
from core.timeutils import utcnow


class Banner(db.Model):
    __tablename__ = "banners"

    id = db.Column(db.Integer, primary_key=True)
    title_fr = db.Column(db.String(255), nullable=True)
    title_ar = db.Column(db.String(255), nullable=True)
    subtitle_fr = db.Column(db.String(255), nullable=True)
    subtitle_ar = db.Column(db.String(255), nullable=True)
    image = db.Column(db.String(500), nullable=False)
    active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)
