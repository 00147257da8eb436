from sqlalchemy import Column, String, DateTime, Uuid
import uuid

from app.core.database import Base, utcnow


class User(Base):
    """Identity record keyed by normalized email"""

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    # otp and otp_expires_at are always set or cleared together
    otp = Column(String(12), nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"

    @property
    def has_pending_otp(self) -> bool:
        return self.otp is not None

    def to_dict(self) -> dict:
        """Convert user to dictionary (excluding OTP state)"""
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
