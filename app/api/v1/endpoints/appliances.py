from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, List
import logging

from app.core.database import get_db
from app.core.deps import AuthUser, general_rate_limiter, get_current_user
from app.core.exceptions import AppError, InternalError
from app.schemas.appliance import ApplianceCreate, ApplianceDeleted, ApplianceResponse
from app.services.appliance_service import get_appliance_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ApplianceResponse, status_code=status.HTTP_201_CREATED)
async def create_appliance(
    appliance_data: ApplianceCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(general_rate_limiter)
):
    """Add an appliance to the current user's list"""
    try:
        appliance_service = get_appliance_service(db)
        appliance = await appliance_service.create_appliance(appliance_data, current_user)
        return ApplianceResponse.model_validate(appliance)

    except AppError:
        raise
    except Exception as e:
        logger.error(f"Appliance creation error: {e}")
        raise InternalError()


@router.get("", response_model=List[ApplianceResponse])
async def list_appliances(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(general_rate_limiter)
):
    """List the current user's appliances, newest first"""
    try:
        appliance_service = get_appliance_service(db)
        appliances = await appliance_service.list_appliances(current_user)
        return [ApplianceResponse.model_validate(a) for a in appliances]

    except AppError:
        raise
    except Exception as e:
        logger.error(f"Appliance listing error: {e}")
        raise InternalError()


@router.put("/{appliance_id}", response_model=ApplianceResponse)
async def update_appliance(
    appliance_id: str,
    # Validated by the service once ownership has been established
    updates: Any = Body(...),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(general_rate_limiter)
):
    """Update some fields of an appliance and recompute its estimates"""
    try:
        appliance_service = get_appliance_service(db)
        appliance = await appliance_service.update_appliance(appliance_id, updates, current_user)
        return ApplianceResponse.model_validate(appliance)

    except AppError:
        raise
    except Exception as e:
        logger.error(f"Appliance update error: {e}")
        raise InternalError()


@router.delete("/{appliance_id}", response_model=ApplianceDeleted)
async def delete_appliance(
    appliance_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(general_rate_limiter)
):
    """Delete an appliance"""
    try:
        appliance_service = get_appliance_service(db)
        await appliance_service.delete_appliance(appliance_id, current_user)
        return ApplianceDeleted(message="Appliance deleted successfully")

    except AppError:
        raise
    except Exception as e:
        logger.error(f"Appliance deletion error: {e}")
        raise InternalError()
