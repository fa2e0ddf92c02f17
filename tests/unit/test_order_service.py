"""
Unit tests for the order service: creation as one unit of work and status changes.
"""

import pytest
from decimal import Decimal
from sqlalchemy.exc import SQLAlchemyError
from comandas.models import Order, OrderItem
from comandas.services import order_service
from comandas.exceptions import ValidationError, NotFoundError, UpstreamError


class TestCreateOrder:

    def test_creates_open_order_with_items(self, session, products):
        order, items = order_service.create_order([
            {'product_id': products['coke'], 'quantity': 2},
        ], session)

        assert order.status == 'open'
        assert order.total == Decimal('20.00')
        assert len(items) == 1
        assert items[0].order_id == order.id
        assert items[0].item_price == Decimal('10.00')
        assert session.query(Order).count() == 1

    def test_item_price_is_captured(self, session, products):
        """Changing the product price later does not touch existing items."""
        from comandas.models import Product

        order, items = order_service.create_order([
            {'product_id': products['coke'], 'quantity': 1},
        ], session)
        item_id = items[0].id

        session.get(Product, products['coke']).price = Decimal('99.00')
        session.commit()

        assert session.get(OrderItem, item_id).item_price == Decimal('10.00')

    def test_validation_failure_writes_nothing(self, session, products):
        with pytest.raises(ValidationError):
            order_service.create_order([{'product_id': products['coke'], 'quantity': 0}], session)

        assert session.query(Order).count() == 0

    def test_unknown_product_writes_nothing(self, session, products):
        with pytest.raises(NotFoundError):
            order_service.create_order([{'product_id': 'nope', 'quantity': 1}], session)

        assert session.query(Order).count() == 0

    def test_item_insert_failure_rolls_back_order(self, session, products, monkeypatch):
        def broken_insert(session, order_id, lines):
            raise SQLAlchemyError('disk full')

        monkeypatch.setattr(order_service, '_insert_order_items', broken_insert)

        with pytest.raises(UpstreamError) as exc:
            order_service.create_order([{'product_id': products['coke'], 'quantity': 1}], session)

        assert 'disk full' in exc.value.message
        assert session.query(Order).count() == 0
        assert session.query(OrderItem).count() == 0

    def test_failed_rollback_is_only_logged(self, session, products, monkeypatch, caplog):
        def broken_insert(session, order_id, lines):
            raise SQLAlchemyError('disk full')

        def broken_rollback():
            raise SQLAlchemyError('connection lost')

        monkeypatch.setattr(order_service, '_insert_order_items', broken_insert)
        monkeypatch.setattr(session(), 'rollback', broken_rollback)

        with pytest.raises(UpstreamError):
            order_service.create_order([{'product_id': products['coke'], 'quantity': 1}], session)

        assert 'Rollback of order' in caplog.text
        monkeypatch.undo()


class TestUpdateOrderStatus:

    @pytest.fixture
    def order_id(self, session, products):
        order, _ = order_service.create_order([{'product_id': products['coke'], 'quantity': 1}], session)
        return order.id

    def test_invalid_status(self, session, order_id):
        with pytest.raises(ValidationError):
            order_service.update_order_status(order_id, 'paid', session)

    def test_unknown_order(self, session):
        with pytest.raises(NotFoundError):
            order_service.update_order_status('nope', 'closed', session)

    def test_close_dispatches_notification(self, app_context, session, order_id, mocker):
        dispatch = mocker.patch('comandas.services.notification_service.dispatch_order_closed')

        order = order_service.update_order_status(order_id, 'closed', session)

        assert order.status == 'closed'
        dispatch.assert_called_once_with(order_id)

    def test_reopen_does_not_notify(self, app_context, session, order_id, mocker):
        dispatch = mocker.patch('comandas.services.notification_service.dispatch_order_closed')

        order = order_service.update_order_status(order_id, 'open', session)

        assert order.status == 'open'
        dispatch.assert_not_called()

    def test_closing_twice_notifies_twice(self, app_context, session, order_id, mocker):
        dispatch = mocker.patch('comandas.services.notification_service.dispatch_order_closed')

        order_service.update_order_status(order_id, 'closed', session)
        order_service.update_order_status(order_id, 'closed', session)

        assert dispatch.call_count == 2


class TestDeleteOrder:

    def test_delete_missing_order(self, session):
        with pytest.raises(NotFoundError):
            order_service.delete_order('nope', session)

    def test_delete_removes_items(self, session, products):
        order, _ = order_service.create_order([{'product_id': products['coke'], 'quantity': 1}], session)

        order_service.delete_order(order.id, session)

        assert session.query(Order).count() == 0
        assert session.query(OrderItem).count() == 0
