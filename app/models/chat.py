from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.db import Base


class ChatSession(Base):
    __tablename__ = "chat_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    session_title = Column(String(200), nullable=True)
    start_time = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    end_time = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(20), default="Active", index=True)  # Active, Completed, Pending_Approval, Approved, Rejected, Archived
    linked_formula_id = Column(Integer, ForeignKey("formulas.id", ondelete="SET NULL"), nullable=True)
    summary = Column(Text, nullable=True)
    metadata_json = Column("metadata", Text, nullable=True)

    interactions = relationship("ChatInteraction", back_populates="session", cascade="all, delete-orphan")


class ChatInteraction(Base):
    __tablename__ = "chat_interactions"

    id = Column(Integer, primary_key=True, index=True)
    chat_session_id = Column(Integer, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    prompt = Column(Text, nullable=False)
    response = Column(Text, nullable=True)
    model_name = Column(String(50), nullable=True)
    tokens_used = Column(Integer, nullable=True)
    response_time_ms = Column(Integer, nullable=True)
    created_on = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    session = relationship("ChatSession", back_populates="interactions")
    attachments = relationship("ChatAttachment", back_populates="interaction", cascade="all, delete-orphan")


class ChatAttachment(Base):
    __tablename__ = "chat_attachments"

    id = Column(Integer, primary_key=True, index=True)
    interaction_id = Column(Integer, ForeignKey("chat_interactions.id", ondelete="CASCADE"), nullable=False, index=True)
    attachment_type = Column(String(30), nullable=False)  # local_file, resource_reference
    file_name = Column(String(255), nullable=True)
    file_url = Column(Text, nullable=True)
    resource_id = Column(Integer, ForeignKey("resources.id", ondelete="SET NULL"), nullable=True, index=True)
    file_size = Column(String(50), nullable=True)
    mime_type = Column(String(100), nullable=True)
    uploaded_on = Column(DateTime(timezone=True), server_default=func.now())

    interaction = relationship("ChatInteraction", back_populates="attachments")
