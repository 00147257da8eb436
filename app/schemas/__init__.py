from .user import (
    OtpRequest, OtpVerify, OtpSent, Token, TokenData
)
from .appliance import (
    ApplianceBase, ApplianceCreate, ApplianceUpdate, ApplianceResponse,
    ApplianceDeleted
)

__all__ = [
    # User schemas
    "OtpRequest", "OtpVerify", "OtpSent", "Token", "TokenData",

    # Appliance schemas
    "ApplianceBase", "ApplianceCreate", "ApplianceUpdate", "ApplianceResponse",
    "ApplianceDeleted"
]
