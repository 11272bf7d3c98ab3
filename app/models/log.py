from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Text, UniqueConstraint
from sqlalchemy.sql import func
from app.core.db import Base


class ApiLog(Base):
    __tablename__ = "api_logs"

    id = Column(Integer, primary_key=True, index=True)
    chat_session_id = Column(Integer, ForeignKey("chat_sessions.id", ondelete="SET NULL"), nullable=True, index=True)
    endpoint = Column(String(100))
    model = Column(String(50))
    tokens_in = Column(Integer)
    tokens_out = Column(Integer)
    total_tokens = Column(Integer)
    latency_ms = Column(Integer)
    cost_usd = Column(Numeric(8, 4))
    created_on = Column(DateTime(timezone=True), server_default=func.now(), index=True)


class UserSession(Base):
    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    login_time = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    logout_time = Column(DateTime(timezone=True), nullable=True)
    ip_address = Column(String(45))
    device_info = Column(String(255))
    auth_method = Column(String(20))  # SSO, Password
    token_id = Column(String(200))
    status = Column(String(20), default="Active", index=True)  # Active, Expired, Terminated


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    module = Column(String(100), index=True)
    action = Column(String(255))
    record_id = Column(Integer, nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    ip_address = Column(String(45))
    details = Column(Text, nullable=True)


class Setting(Base):
    __tablename__ = "settings"
    __table_args__ = (UniqueConstraint("category", "key", name="unique_category_key"),)

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String(30), index=True)  # Branding, DecisionTree, QuoteTemplate, AIConfig
    key = Column(String(100), nullable=False)
    value = Column(Text, nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    updated_on = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
