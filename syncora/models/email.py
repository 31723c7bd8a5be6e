from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from syncora.database import Base
from syncora.models.user import generate_uuid


class Email(Base):
    __tablename__ = "emails"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message_id = Column(String(255), nullable=False)
    thread_id = Column(String(255), nullable=True)
    sender = Column("from", String(255), nullable=False)
    subject = Column(Text, nullable=False)
    snippet = Column(Text, nullable=True)
    body = Column(Text, nullable=True)
    priority = Column(String(16), nullable=False, default="low")
    is_read = Column(Boolean, default=False, nullable=False)
    received_at = Column(DateTime, nullable=False)
    summary = Column(Text, nullable=True)
    extracted_meeting = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="emails")
