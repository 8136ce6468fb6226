"""
Notification model for per-user trip alerts.
"""
from sqlalchemy import Column, String, Text, Boolean, ForeignKey, Integer
from sqlalchemy.orm import relationship
from tripledger.db.base import BaseModel


class Notification(BaseModel):
    """A persisted alert for one user about a change in one trip."""
    __tablename__ = "notifications"
    
    trip_id = Column(Integer, ForeignKey("trips.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    
    # Relationships
    trip = relationship("Trip", back_populates="notifications")
    user = relationship("User", back_populates="notifications")
