"""
Order service with transactional logic.
Handles order creation, status transitions and the order-closed notification.
"""
import logging
from typing import Any, Dict, List, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from comandas.models import Order, OrderItem, OrderStatus
from comandas.exceptions import AppError, ValidationError, NotFoundError, UpstreamError
from comandas.services.pricing_service import price_order_items

logger = logging.getLogger(__name__)


def create_order(items: Any, session) -> Tuple[Order, List[OrderItem]]:
    """
    Create an open order and its items in a single unit of work.

    Steps:
    1. Validate and price the requested items (no writes on failure)
    2. Insert the order and flush it so its id exists
    3. Insert one item per line with the captured unit price
    4. If step 3 fails, roll the unit of work back once so the order
       disappears, then report the item error
    5. Commit

    Args:
        items: [{'product_id': ..., 'quantity': ...}, ...]
        session: SQLAlchemy session

    Returns:
        (order, inserted items)

    Raises:
        ValidationError, NotFoundError: Invalid request, nothing written
        UpstreamError: Persistence failure
    """
    lines, total = price_order_items(items, session)

    # 2. Create Order
    order = Order(total=total, status=OrderStatus.OPEN.value)
    try:
        session.add(order)
        session.flush()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error creating order: {e}")
        raise UpstreamError(f'Error al crear la orden: {e}') from e

    order_id = order.id

    # 3. Create OrderItems
    try:
        inserted = _insert_order_items(session, order_id, lines)
        session.commit()
    except Exception as e:
        logger.error(f"Error inserting items of order {order_id}: {e}")
        _rollback_order(session, order_id)
        if isinstance(e, AppError):
            raise
        raise UpstreamError(f'Error al registrar los items de la orden: {e}') from e

    for item in inserted:
        session.refresh(item)
    session.refresh(order)
    logger.info(f"Order {order.id} created with {len(inserted)} item(s), total {order.total}")
    return order, inserted


def update_order_status(order_id: str, status: Any, session) -> Order:
    """
    Set the status of an order.

    The update runs whatever the current status is. Once it is committed, a
    transition to 'closed' dispatches the order-closed notification, which
    cannot change the outcome of this call.

    Raises:
        ValidationError: status is not 'open' or 'closed'
        NotFoundError: No order with that id
        UpstreamError: Persistence failure
    """
    if status not in OrderStatus.values():
        raise ValidationError('Estado de orden inválido.')

    order = session.get(Order, str(order_id))
    if order is None:
        raise NotFoundError('Orden no encontrada.')

    try:
        order.status = status
        session.commit()
        session.refresh(order)
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error updating status of order {order_id}: {e}")
        raise UpstreamError(f'Error al actualizar el estado de la orden: {e}') from e

    logger.info(f"Order {order.id} set to '{status}'")

    if status == OrderStatus.CLOSED.value:
        from comandas.services.notification_service import dispatch_order_closed
        dispatch_order_closed(order.id)

    return order


def list_orders(session) -> List[Order]:
    """All orders, newest first, with items and their products loaded."""
    return session.query(Order).options(
        selectinload(Order.items).selectinload(OrderItem.product)
    ).order_by(Order.created_at.desc()).all()


def get_order(order_id: str, session) -> Order:
    order = session.query(Order).options(
        selectinload(Order.items).selectinload(OrderItem.product)
    ).filter(Order.id == str(order_id)).first()
    if order is None:
        raise NotFoundError('Orden no encontrada.')
    return order


def delete_order(order_id: str, session) -> None:
    """Delete an order; its items go with it."""
    order = session.get(Order, str(order_id))
    if order is None:
        raise NotFoundError('Orden no encontrada.')

    try:
        session.delete(order)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error deleting order {order_id}: {e}")
        raise UpstreamError(f'Error al eliminar la orden: {e}') from e

    logger.info(f"Order {order_id} deleted")


# =====================================================
# PRIVATE HELPERS
# =====================================================

def _insert_order_items(session, order_id: str, lines: List[Dict[str, Any]]) -> List[OrderItem]:
    """Write one OrderItem per priced line."""
    inserted = []
    for line in lines:
        item = OrderItem(
            order_id=order_id,
            product_id=line['product_id'],
            quantity=line['quantity'],
            item_price=line['item_price']
        )
        session.add(item)
        inserted.append(item)
    session.flush()
    return inserted


def _rollback_order(session, order_id: str) -> None:
    """Undo the order insert. Attempted once; a failure here is only logged."""
    try:
        session.rollback()
        logger.info(f"Order {order_id} rolled back after item insert failure")
    except Exception as e:
        logger.error(f"Rollback of order {order_id} failed, it may be left without items: {e}")
