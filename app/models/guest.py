"""
Guest model
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, Text

from app.core.db import Base

def new_guest_id() -> str:
    return uuid.uuid4().hex

class Guest(Base):
    __tablename__ = "guests"

    id = Column(String(64), primary_key=True, default=new_guest_id)
    name = Column(String(255), nullable=False, index=True)
    role = Column(String(100), default="")
    email = Column(String(255), default="")
    contact = Column(String(50), default="")
    message = Column(Text, default="")
    allowed_guests = Column(Integer, nullable=False, default=1)
    companions = Column(JSON, nullable=False, default=list)  # [{name, relationship}]
    table_number = Column(String(50), default="")
    is_vip = Column(Boolean, default=False)
    status = Column(String(20), nullable=False, default="pending")  # pending, confirmed, declined, request
    added_by = Column(String(100), default="")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
