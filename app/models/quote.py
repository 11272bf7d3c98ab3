from sqlalchemy import Boolean, Column, Integer, String, DateTime, ForeignKey, Numeric, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.db import Base
from app.models.enums import QuoteStatus


class QuoteTemplate(Base):
    __tablename__ = "quote_templates"

    id = Column(Integer, primary_key=True, index=True)
    template_name = Column(String(100), nullable=False)
    layout = Column(Text, nullable=True)
    is_default = Column(Boolean, default=False)
    created_on = Column(DateTime(timezone=True), server_default=func.now())


class Quote(Base):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    formula_id = Column(Integer, ForeignKey("formulas.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    customer_name = Column(String(200), nullable=True)
    total_price = Column(Numeric(12, 2), nullable=True)
    status = Column(String(20), default=QuoteStatus.DRAFT.value, nullable=False, index=True)
    template_id = Column(Integer, ForeignKey("quote_templates.id", ondelete="SET NULL"), nullable=True)
    created_on = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_on = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    formula = relationship("Formula")
    creator = relationship("User", foreign_keys=[created_by])
    template = relationship("QuoteTemplate")

    @property
    def formula_name(self):
        return self.formula.formula_name if self.formula else None

    @property
    def creator_name(self):
        return self.creator.username if self.creator else None

    @property
    def template_name(self):
        return self.template.template_name if self.template else None
