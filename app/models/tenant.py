"""
Tenant model
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, Date, Boolean, DateTime
from sqlalchemy.orm import relationship

from app.core.db import Base

class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(50), unique=True, nullable=False, index=True)
    bride_name = Column(String(100), nullable=False)
    groom_name = Column(String(100), nullable=False)
    wedding_date = Column(Date, nullable=False)
    venue_name = Column(String(200), nullable=False)
    venue_address = Column(Text, nullable=False)
    venue_map_link = Column(Text, nullable=True)
    theme_primary_color = Column(String(7), default="#E53E3E")
    theme_secondary_color = Column(String(7), default="#FED7D7")
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    guests = relationship("Guest", back_populates="tenant", cascade="all, delete-orphan", passive_deletes=True)
