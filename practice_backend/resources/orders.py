# practice_backend/resources/orders.py

import logging
from datetime import datetime

from practice_backend.database.models import ORDER_STATUSES, Order
from practice_backend.errors import BadRequest, Conflict, NotFound

logger = logging.getLogger(__name__)

# Allowed status moves; delivered and cancelled are terminal
STATUS_TRANSITIONS = {
    "pending": {"processing", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": set(),
    "cancelled": set(),
}


def can_transition(current, new):
    return new == current or new in STATUS_TRANSITIONS.get(current, set())


class OrderService:
    def __init__(self, session):
        self.session = session

    def create(self, user_id, items, total):
        # total is taken as sent; stock is not adjusted
        order = Order(user_id=user_id, items=items, total=total, status="pending")
        self.session.add(order)
        self.session.commit()
        return order

    def list_for_user(self, user_id):
        return (
            self.session.query(Order)
            .filter_by(user_id=user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def get_for_user(self, order_id, user_id):
        # scoped lookup: someone else's order is indistinguishable from a missing one
        order = self.session.query(Order).filter_by(id=order_id, user_id=user_id).first()
        if order is None:
            raise NotFound("Order not found")
        return order

    def update_status(self, order_id, status):
        if status not in ORDER_STATUSES:
            raise BadRequest(f"Status must be one of: {', '.join(ORDER_STATUSES)}")
        order = self.session.get(Order, order_id)
        if order is None:
            raise NotFound("Order not found")
        if not can_transition(order.status, status):
            raise Conflict(f"Cannot change order status from {order.status} to {status}")

        logger.info("Order %s status %s -> %s", order.id, order.status, status)
        order.status = status
        order.updated_at = datetime.utcnow()
        self.session.commit()
        return order
