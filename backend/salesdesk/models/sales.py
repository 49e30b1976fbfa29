from __future__ import annotations

from ..extensions import db
from salesdesk.time_utils import utcnow


class Sale(db.Model):
    """
    A quantity of one product sold at a point in time.

    product_name and total_price_cents are snapshots taken when the sale
    is recorded; later product edits never rewrite them.

    product_id is a weak reference (indexed, no foreign key): a sale keeps
    its snapshot after the product row is deleted.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        db.Index("ix_sales_sold_at", "sold_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, nullable=True, index=True)
    product_name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    total_price_cents = db.Column(db.Integer, nullable=False)

    sold_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    # Signed-in user who recorded the sale
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
