# backend/models/conversation.py
from sqlalchemy import Column, Integer, Text, DateTime, JSON
from database import Base, utcnow


# A customer message and the reply drafts generated for it
class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, index=True)
    customer_message = Column(Text, nullable=False)

    # Ordered warm, precise, brief
    generated_responses = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
