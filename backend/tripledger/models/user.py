"""
User model for authentication and user management.
"""
from sqlalchemy import Column, String, Boolean
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel


class User(BaseModel):
    """User model with immutable username."""
    __tablename__ = "users"
    
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    
    # Relationships
    memberships = relationship("TripMember", back_populates="user", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
