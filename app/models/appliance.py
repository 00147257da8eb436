from sqlalchemy import Column, String, DateTime, Float, Integer, ForeignKey, Uuid
import uuid

from app.core.database import Base, utcnow


class Appliance(Base):
    """Household appliance owned by a single user"""

    __tablename__ = "appliances"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    rating = Column(Float, nullable=False)  # kW
    hourly_usage = Column(Float, nullable=False)  # hours per day
    quantity = Column(Integer, nullable=False)
    day_frequency = Column(Integer, nullable=False)  # days per week
    unit_rate = Column(Float, nullable=True)  # per kWh, falls back to DEFAULT_UNIT_RATE

    # Derived, always computed server-side
    consumption_per_day = Column(Float, nullable=False)
    consumption_per_week = Column(Float, nullable=False)
    consumption_per_month = Column(Float, nullable=False)
    monthly_cost = Column(Float, nullable=False)

    # Microsecond timestamps keep newest-first ordering stable
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Appliance(id={self.id}, name={self.name}, user_id={self.user_id})>"

    def to_dict(self) -> dict:
        """Convert appliance to dictionary"""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "name": self.name,
            "rating": self.rating,
            "hourly_usage": self.hourly_usage,
            "quantity": self.quantity,
            "day_frequency": self.day_frequency,
            "unit_rate": self.unit_rate,
            "consumption_per_day": self.consumption_per_day,
            "consumption_per_week": self.consumption_per_week,
            "consumption_per_month": self.consumption_per_month,
            "monthly_cost": self.monthly_cost,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
