from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.db import Base
from app.models.enums import Decision


class Approval(Base):
    """
    Approval ledger row for a Formula, Quote or Resource.

    At most one row per (entity_type, entity_id) is ``Pending`` at a time;
    the approval engine enforces this, the schema does not.
    """

    __tablename__ = "approvals"
    __table_args__ = (Index("idx_entity", "entity_type", "entity_id"),)

    id = Column(Integer, primary_key=True, index=True)
    entity_type = Column(String(20), nullable=False)  # Formula, Quote, Resource
    entity_id = Column(Integer, nullable=False)
    # Holds the requester while Pending, replaced by the real approver on decision
    approver_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    decision = Column(String(20), default=Decision.PENDING.value, nullable=False, index=True)
    decision_date = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), index=True)
    comments = Column(Text, nullable=True)

    approver = relationship("User", foreign_keys=[approver_id])

    @property
    def approver_name(self):
        return self.approver.username if self.approver else None
