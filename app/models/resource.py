from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.db import Base
from app.models.enums import ApprovalStatus, ResourceCategory


class Resource(Base):
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, index=True)
    file_name = Column(String(255), nullable=False)
    file_type = Column(String(100), nullable=False)  # PDF Document, Excel Spreadsheet, ...
    file_size = Column(String(50), nullable=False)  # human readable, e.g. "1.5 KB"
    file_url = Column(Text, nullable=False)
    category = Column(String(20), default=ResourceCategory.OTHER.value, nullable=False, index=True)
    uploaded_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    uploaded_on = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    description = Column(Text, nullable=True)

    # Approval workflow
    approval_status = Column(String(20), default=ApprovalStatus.PENDING.value, nullable=False, index=True)
    approved_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    approved_on = Column(DateTime(timezone=True), nullable=True)

    uploader = relationship("User", foreign_keys=[uploaded_by])
    approver = relationship("User", foreign_keys=[approved_by])

    @property
    def uploader_name(self):
        return self.uploader.username if self.uploader else None

    @property
    def approver_name(self):
        return self.approver.username if self.approver else None
