"""Order Item model."""
from sqlalchemy import Column, String, Integer, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from comandas.database import Base, new_uuid


class OrderItem(Base):
    """Order line. item_price is the product price captured when the order was created."""

    __tablename__ = 'order_items'

    id = Column(String(36), primary_key=True, default=new_uuid)
    order_id = Column(String(36), ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey('products.id'), nullable=False)
    quantity = Column(Integer, nullable=False)
    item_price = Column(Numeric(10, 2), nullable=False)

    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_order_items_quantity_positive'),
    )

    # Relationships
    order = relationship('Order', back_populates='items')
    product = relationship('Product')

    @property
    def line_total(self):
        return self.item_price * self.quantity

    def to_dict(self, include_product=False):
        rv = {
            'id': self.id,
            'order_id': self.order_id,
            'product_id': self.product_id,
            'quantity': self.quantity,
            'item_price': float(self.item_price) if self.item_price is not None else None,
        }
        if include_product:
            rv['product'] = {
                'name': self.product.name,
                'price': float(self.product.price),
            } if self.product else None
        return rv

    def __repr__(self):
        return f"<OrderItem(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"
