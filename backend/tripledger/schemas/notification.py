"""
Pydantic schemas for notifications.
"""
from pydantic import BaseModel
from datetime import datetime


class NotificationResponse(BaseModel):
    """Schema for notification response."""
    id: int
    trip_id: int
    user_id: int
    type: str
    title: str
    message: str
    read: bool
    created_at: datetime
    
    class Config:
        from_attributes = True
