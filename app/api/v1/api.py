from fastapi import APIRouter

from app.api.v1.endpoints import appliances, auth

api_router = APIRouter()

# Include OTP authentication endpoints
api_router.include_router(auth.router, prefix="/otp", tags=["authentication"])

# Include appliance ledger endpoints
api_router.include_router(appliances.router, prefix="/appliances", tags=["appliances"])
