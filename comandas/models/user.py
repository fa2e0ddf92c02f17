"""User model - restaurant staff with username/password authentication."""
import enum
from sqlalchemy import Column, String, DateTime, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from werkzeug.security import generate_password_hash, check_password_hash
from comandas.database import Base, new_uuid


class UserRole(enum.Enum):
    """Staff roles."""
    ADMIN = 'admin'
    WAITER = 'waiter'

    @classmethod
    def values(cls):
        return [role.value for role in cls]


class User(Base):
    """Staff member (admin or waiter)."""

    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=new_uuid)
    username = Column(String(150), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.WAITER.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Usernames are unique regardless of case
    __table_args__ = (
        Index('ux_users_username_lower', func.lower(username), unique=True),
    )

    # Relationships
    push_subscriptions = relationship(
        'PushSubscription',
        back_populates='user',
        cascade='all, delete-orphan',
        passive_deletes=True
    )

    def set_password(self, password):
        """Set password hash."""
        self.password_hash = generate_password_hash(password, method='scrypt')

    def check_password(self, password):
        """Check password against hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def is_admin(self):
        return self.role == UserRole.ADMIN.value

    def to_dict(self):
        """Public representation; the password hash never leaves the server."""
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
