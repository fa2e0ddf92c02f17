"""Category model."""
from sqlalchemy import Column, String, DateTime, Index
from sqlalchemy.sql import func
from comandas.database import Base, new_uuid


class Category(Base):
    """Product Category."""

    __tablename__ = 'categories'

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(150), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('ux_categories_name_lower', func.lower(name), unique=True),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"
