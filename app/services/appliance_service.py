from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from pydantic import ValidationError as SchemaValidationError
from typing import Any, Dict, List
import math
import uuid

from app.core.deps import AuthUser
from app.core.exceptions import Forbidden, NotFound, ValidationError
from app.core.logging import get_logger
from app.models.appliance import Appliance
from app.schemas.appliance import ApplianceCreate, ApplianceUpdate
from app.services.consumption import estimate_consumption

logger = get_logger(__name__)

# Inputs that feed the derived fields; unit_rate may be cleared to use the default
INPUT_FIELDS = ("name", "rating", "hourly_usage", "quantity", "day_frequency", "unit_rate")
NULLABLE_FIELDS = frozenset({"unit_rate"})


def first_error_message(exc: SchemaValidationError) -> str:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", "Invalid input")
    return f"{field}: {message}" if field else message


class ApplianceService:
    """Per-user appliance ledger with server-computed consumption figures"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _estimate(values: Dict[str, Any]) -> Dict[str, float]:
        """Derived fields for the given inputs; every figure must be finite"""
        estimate = estimate_consumption(
            rating=values["rating"],
            hourly_usage=values["hourly_usage"],
            quantity=values["quantity"],
            day_frequency=values["day_frequency"],
            unit_rate=values.get("unit_rate"),
        ).as_dict()

        if not all(math.isfinite(value) for value in estimate.values()):
            raise ValidationError("Consumption estimate is out of range")
        return estimate

    async def create_appliance(self, data: ApplianceCreate, user: AuthUser) -> Appliance:
        values = data.model_dump(include=set(INPUT_FIELDS))
        appliance = Appliance(user_id=uuid.UUID(str(user.id)), **values, **self._estimate(values))

        self.db.add(appliance)
        await self.db.commit()
        await self.db.refresh(appliance)

        logger.info("Appliance created", appliance_id=appliance.id, user_id=user.id)
        return appliance

    async def list_appliances(self, user: AuthUser) -> List[Appliance]:
        stmt = (
            select(Appliance)
            .where(Appliance.user_id == uuid.UUID(str(user.id)))
            .order_by(desc(Appliance.created_at))
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_owned_appliance(self, appliance_id: str, user: AuthUser) -> Appliance:
        """Fetch an appliance, distinguishing a missing record from a foreign one"""
        try:
            key = uuid.UUID(str(appliance_id))
        except ValueError:
            raise NotFound("Appliance not found")

        appliance = await self.db.get(Appliance, key)
        if appliance is None:
            raise NotFound("Appliance not found")

        if str(appliance.user_id) != str(user.id):
            logger.warning("Appliance access denied", appliance_id=key, user_id=user.id)
            raise Forbidden("Forbidden")

        return appliance

    async def update_appliance(self, appliance_id: str, updates: Any, user: AuthUser) -> Appliance:
        """Merge a partial update and recompute every derived field.

        Ownership is checked before the payload is validated.
        """
        appliance = await self.get_owned_appliance(appliance_id, user)

        if not isinstance(updates, dict):
            raise ValidationError("Request body must be a JSON object")

        try:
            changes = ApplianceUpdate.model_validate(updates).model_dump(exclude_unset=True)
        except SchemaValidationError as e:
            raise ValidationError(first_error_message(e))

        for field, value in changes.items():
            if value is None and field not in NULLABLE_FIELDS:
                raise ValidationError(f"{field}: may not be null")

        values = {field: getattr(appliance, field) for field in INPUT_FIELDS}
        values.update(changes)
        estimate = self._estimate(values)

        for field, value in {**changes, **estimate}.items():
            setattr(appliance, field, value)

        await self.db.commit()
        await self.db.refresh(appliance)

        logger.info("Appliance updated", appliance_id=appliance.id, fields=",".join(changes) or "-")
        return appliance

    async def delete_appliance(self, appliance_id: str, user: AuthUser) -> None:
        appliance = await self.get_owned_appliance(appliance_id, user)

        await self.db.delete(appliance)
        await self.db.commit()

        logger.info("Appliance deleted", appliance_id=appliance_id, user_id=user.id)


def get_appliance_service(db: AsyncSession) -> ApplianceService:
    """Dependency to get appliance service"""
    return ApplianceService(db)
