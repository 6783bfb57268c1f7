"""ConsumptionEntry model for billing and recycling submissions."""

import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database import Base


ENTRY_KIND_BILLING = "billing"
ENTRY_KIND_RECYCLING = "recycling"
ENTRY_KINDS = (ENTRY_KIND_BILLING, ENTRY_KIND_RECYCLING)


class ConsumptionEntry(Base):
    """Immutable ledger entry. Rows are appended, never updated or deleted."""

    __tablename__ = "consumption_entries"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    kind = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False)
    quantity = Column(Float, nullable=False)
    date = Column(Date, nullable=False, index=True)
    emission_factor = Column(Float, nullable=False)
    used_fallback_factor = Column(Boolean, nullable=False, default=False)
    carbon_emissions = Column(Float, nullable=False)
    credits_earned = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    user = relationship("User", back_populates="entries")

    def to_dict(self):
        return {
            "id": self.id,
            "kind": self.kind,
            "category": self.category,
            "quantity": self.quantity,
            "date": self.date.isoformat() if self.date else None,
            "emission_factor": self.emission_factor,
            "used_fallback_factor": bool(self.used_fallback_factor),
            "carbon_emissions": self.carbon_emissions,
            "credits_earned": self.credits_earned,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
