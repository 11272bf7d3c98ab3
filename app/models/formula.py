from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.db import Base
from app.models.enums import FormulaStatus


class Formula(Base):
    __tablename__ = "formulas"

    id = Column(Integer, primary_key=True, index=True)
    formula_name = Column(String(200), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    density = Column(Numeric(10, 3), nullable=True)
    total_cost = Column(Numeric(12, 2), nullable=True)
    margin = Column(Numeric(5, 2), nullable=True)
    container_cost = Column(Numeric(10, 2), nullable=True)
    status = Column(String(20), default=FormulaStatus.DRAFT.value, nullable=False, index=True)
    created_on = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_on = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    creator = relationship("User", foreign_keys=[created_by])
    components = relationship(
        "FormulaComponent",
        back_populates="formula",
        cascade="all, delete-orphan",
        order_by="FormulaComponent.id",
    )

    @property
    def creator_name(self):
        return self.creator.username if self.creator else None


class FormulaComponent(Base):
    __tablename__ = "formula_components"

    id = Column(Integer, primary_key=True, index=True)
    formula_id = Column(Integer, ForeignKey("formulas.id", ondelete="CASCADE"), nullable=False, index=True)
    chemical_name = Column(String(255), nullable=False)
    percentage = Column(Numeric(5, 2), nullable=False)  # not validated to sum to 100
    cost_per_lb = Column(Numeric(10, 2), nullable=True)
    hazard_class = Column(String(50), nullable=True)

    formula = relationship("Formula", back_populates="components")
