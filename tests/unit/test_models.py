"""
Unit tests for SQLAlchemy models.
"""

import pytest
from decimal import Decimal
from sqlalchemy.exc import IntegrityError
from comandas.models import User, Category, Product, Order, OrderItem, OrderStatus, PushSubscription


class TestUserModel:
    """Tests for User model."""

    def test_create_user(self, session):
        """Test creating a user."""
        user = User(username='cocina', role='waiter')
        user.set_password('securepassword')
        session.add(user)
        session.commit()

        assert user.id is not None
        assert len(user.id) == 36
        assert user.password_hash != 'securepassword'
        assert user.created_at is not None

    def test_password_hashing(self):
        """Test password hashing and verification."""
        user = User(username='caja', role='waiter')
        user.set_password('mypassword')

        assert user.check_password('mypassword') is True
        assert user.check_password('wrongpassword') is False

    def test_username_unique_ignoring_case(self, session, admin_id):
        """Test that usernames collide regardless of case."""
        duplicate = User(username='ADMIN', role='waiter')
        duplicate.set_password('whatever')
        session.add(duplicate)

        with pytest.raises(IntegrityError):
            session.commit()

    def test_to_dict_hides_password(self, session, admin_id):
        user = session.get(User, admin_id)
        data = user.to_dict()

        assert data['username'] == 'admin'
        assert data['role'] == 'admin'
        assert 'password_hash' not in data


class TestCategoryModel:
    """Tests for Category model."""

    def test_category_name_unique_ignoring_case(self, session, category_id):
        session.add(Category(name='bebidas'))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_delete_category_keeps_products(self, session, products, category_id):
        """ON DELETE SET NULL: products survive without a category."""
        session.delete(session.get(Category, category_id))
        session.commit()

        coke = session.get(Product, products['coke'])
        assert coke is not None
        assert coke.category_id is None
        assert coke.to_dict()['category'] is None


class TestProductModel:
    """Tests for Product model."""

    def test_to_dict_includes_category_name(self, session, products):
        data = session.get(Product, products['coke']).to_dict()

        assert data['name'] == 'Coca Cola'
        assert data['price'] == 10.0
        assert data['category'] == {'name': 'Bebidas'}


class TestOrderModel:
    """Tests for Order and OrderItem models."""

    def test_order_defaults_to_open(self, session):
        order = Order(total=Decimal('0.00'))
        session.add(order)
        session.commit()

        assert order.status == OrderStatus.OPEN.value
        assert order.is_closed is False

    def test_item_quantity_must_be_positive(self, session, products):
        order = Order(total=Decimal('0.00'))
        session.add(order)
        session.flush()
        session.add(OrderItem(order_id=order.id, product_id=products['coke'], quantity=0, item_price=Decimal('10.00')))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_deleting_order_deletes_items(self, session, products):
        order = Order(total=Decimal('20.00'))
        order.items.append(OrderItem(product_id=products['coke'], quantity=2, item_price=Decimal('10.00')))
        session.add(order)
        session.commit()
        order_id = order.id

        session.delete(order)
        session.commit()

        assert session.query(OrderItem).filter_by(order_id=order_id).count() == 0

    def test_line_total_and_serialization(self, session, products):
        order = Order(total=Decimal('20.00'))
        item = OrderItem(product_id=products['coke'], quantity=2, item_price=Decimal('10.00'))
        order.items.append(item)
        session.add(order)
        session.commit()

        assert item.line_total == Decimal('20.00')
        data = order.to_dict(include_items=True)
        assert data['total'] == 20.0
        assert data['order_items'][0]['product'] == {'name': 'Coca Cola', 'price': 10.0}


class TestPushSubscriptionModel:
    """Tests for PushSubscription model."""

    def test_endpoint_unique(self, session, admin_id):
        session.add(PushSubscription(user_id=admin_id, endpoint='https://push.example/X', p256dh='p', auth='a'))
        session.commit()
        session.add(PushSubscription(user_id=admin_id, endpoint='https://push.example/X', p256dh='p2', auth='a2'))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_subscription_info_shape(self):
        sub = PushSubscription(endpoint='https://push.example/X', p256dh='p', auth='a')

        assert sub.to_subscription_info() == {
            'endpoint': 'https://push.example/X',
            'keys': {'p256dh': 'p', 'auth': 'a'},
        }

    def test_deleting_user_deletes_subscriptions(self, session, admin_id):
        session.add(PushSubscription(user_id=admin_id, endpoint='https://push.example/X', p256dh='p', auth='a'))
        session.commit()

        session.delete(session.get(User, admin_id))
        session.commit()

        assert session.query(PushSubscription).count() == 0
