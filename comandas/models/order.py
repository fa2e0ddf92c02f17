"""Order model."""
from sqlalchemy import Column, String, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.sql import func
from comandas.database import Base, new_uuid
import enum


class OrderStatus(enum.Enum):
    """Order status enum."""
    OPEN = 'open'
    CLOSED = 'closed'

    @classmethod
    def values(cls):
        return [status.value for status in cls]


class Order(Base):
    """Order (comanda) taken by a waiter."""

    __tablename__ = 'orders'

    id = Column(String(36), primary_key=True, default=new_uuid)
    total = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.OPEN.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    items = relationship(
        'OrderItem',
        back_populates='order',
        cascade='all, delete-orphan',
        passive_deletes=True
    )

    @hybrid_property
    def is_closed(self):
        return self.status == OrderStatus.CLOSED.value

    def to_dict(self, include_items=False):
        rv = {
            'id': self.id,
            'total': float(self.total) if self.total is not None else None,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_items:
            rv['order_items'] = [item.to_dict(include_product=True) for item in self.items]
        return rv

    def __repr__(self):
        return f"<Order(id={self.id}, total={self.total}, status={self.status})>"
