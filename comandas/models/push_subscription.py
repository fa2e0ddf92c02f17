"""Web Push subscription model."""
from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from comandas.database import Base, new_uuid


class PushSubscription(Base):
    """Browser push subscription. A user keeps at most one."""

    __tablename__ = 'push_subscriptions'

    id = Column(String(36), primary_key=True, default=new_uuid)
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    endpoint = Column(Text, nullable=False, unique=True)
    p256dh = Column(String(255), nullable=False)
    auth = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    user = relationship('User', back_populates='push_subscriptions')

    def to_subscription_info(self):
        """Shape expected by the push transport."""
        return {
            'endpoint': self.endpoint,
            'keys': {
                'p256dh': self.p256dh,
                'auth': self.auth,
            },
        }

    def __repr__(self):
        return f"<PushSubscription(id={self.id}, user_id={self.user_id})>"
