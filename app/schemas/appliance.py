from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime
import uuid


class ApplianceBase(BaseModel):
    """Input fields of an appliance"""
    name: str = Field(..., min_length=1, max_length=255)
    rating: float = Field(..., ge=0, allow_inf_nan=False, description="Power rating in kilowatts")
    hourly_usage: float = Field(..., ge=0, allow_inf_nan=False, description="Hours used per day")
    quantity: int = Field(..., ge=1)
    day_frequency: int = Field(..., ge=0, le=7, description="Days used per week")
    unit_rate: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="Price per kWh")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Appliance name required")
        return v


class ApplianceCreate(ApplianceBase):
    """Schema for appliance creation"""
    pass


class ApplianceUpdate(BaseModel):
    """Schema for partial appliance updates"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    rating: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    hourly_usage: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    quantity: Optional[int] = Field(None, ge=1)
    day_frequency: Optional[int] = Field(None, ge=0, le=7)
    unit_rate: Optional[float] = Field(None, ge=0, allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Appliance name required")
        return v


class ApplianceResponse(ApplianceBase):
    """Schema for appliance response"""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: uuid.UUID
    consumption_per_day: float
    consumption_per_week: float
    consumption_per_month: float
    monthly_cost: float
    created_at: datetime
    updated_at: datetime


class ApplianceDeleted(BaseModel):
    """Schema for delete confirmation"""
    message: str
