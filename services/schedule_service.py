from datetime import datetime
from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from api.dependencies import TenantContext
from app.exceptions import ForbiddenError, NotFoundError, ServiceValidationError
from core.recurrence import day_of_week_name
from core.timezones import ensure_utc
from domain.models import Block, WorkingHours
from domain.schemas.scheduling_schemas import (
    BlockCreate,
    WorkingHoursResponse,
    WorkingHoursUpdate,
)
from repositories import BlockRepository, WorkingHoursRepository
from services.user_service import UserService

logger = logging.getLogger("offleash.schedule")


def require_self_or_admin(tenant: TenantContext, walker_id: UUID, action: str) -> None:
    if not (tenant.is_admin or tenant.user_id == walker_id):
        raise ForbiddenError(f"Only admins or the walker may {action}")


def to_working_hours_response(row: WorkingHours) -> WorkingHoursResponse:
    return WorkingHoursResponse(
        id=row.id,
        walker_id=row.walker_id,
        day_of_week=row.day_of_week,
        day_name=day_of_week_name(row.day_of_week),
        start_time=row.start_time,
        end_time=row.end_time,
        is_active=row.is_active,
    )


class ScheduleService:
    """Walker weekly working hours and blocked time"""

    @staticmethod
    def get_working_hours(db: Session, tenant: TenantContext, walker_id: UUID) -> List[WorkingHoursResponse]:
        UserService.get_walker(db, tenant.org_id, walker_id)
        rows = WorkingHoursRepository(db).list_for_walker(tenant.org_id, walker_id)
        return [to_working_hours_response(r) for r in rows]

    @staticmethod
    def replace_working_hours(
        db: Session, tenant: TenantContext, walker_id: UUID, data: WorkingHoursUpdate
    ) -> List[WorkingHoursResponse]:
        """Replace the whole week in one transaction"""
        require_self_or_admin(tenant, walker_id, "change working hours")
        UserService.get_walker(db, tenant.org_id, walker_id)

        seen = set()
        for day in data.days:
            if day.day_of_week in seen:
                raise ServiceValidationError(
                    f"Duplicate day_of_week: {day.day_of_week}", code="DUPLICATE_DAY"
                )
            seen.add(day.day_of_week)
            if day.start_time >= day.end_time:
                raise ServiceValidationError(
                    f"{day_of_week_name(day.day_of_week)}: start time must be before end time",
                    code="INVALID_TIME_RANGE",
                )

        repo = WorkingHoursRepository(db)
        try:
            repo.delete_for_walker(tenant.org_id, walker_id)
            for day in data.days:
                db.add(
                    WorkingHours(
                        organization_id=tenant.org_id,
                        walker_id=walker_id,
                        day_of_week=day.day_of_week,
                        start_time=day.start_time,
                        end_time=day.end_time,
                        is_active=day.is_active,
                    )
                )
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error replacing working hours for walker %s", walker_id)
            raise

        logger.info(f"working_hours_replaced walker_id={walker_id} days={len(data.days)}")
        return [to_working_hours_response(r) for r in repo.list_for_walker(tenant.org_id, walker_id)]

    @staticmethod
    def clear_working_hours(db: Session, tenant: TenantContext, walker_id: UUID) -> int:
        require_self_or_admin(tenant, walker_id, "change working hours")
        try:
            deleted = WorkingHoursRepository(db).delete_for_walker(tenant.org_id, walker_id)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception("Error clearing working hours for walker %s", walker_id)
            raise
        return deleted

    @staticmethod
    def list_blocks(
        db: Session,
        tenant: TenantContext,
        walker_id: Optional[UUID] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Block]:
        walker_id = walker_id or tenant.user_id
        require_self_or_admin(tenant, walker_id, "view blocked time")
        return BlockRepository(db).list_overlapping(
            tenant.org_id,
            walker_id,
            ensure_utc(start) if start else None,
            ensure_utc(end) if end else None,
        )

    @staticmethod
    def create_block(db: Session, tenant: TenantContext, data: BlockCreate) -> Block:
        walker_id = data.walker_id or tenant.user_id
        require_self_or_admin(tenant, walker_id, "block time")
        UserService.get_walker(db, tenant.org_id, walker_id)

        start, end = ensure_utc(data.start_time), ensure_utc(data.end_time)
        if start >= end:
            raise ServiceValidationError("Start time must be before end time", code="INVALID_TIME_RANGE")

        block = Block(
            organization_id=tenant.org_id,
            walker_id=walker_id,
            reason=data.reason,
            start_time=start,
            end_time=end,
            is_recurring=data.is_recurring,
        )
        try:
            block = BlockRepository(db).create(block)
        except Exception:
            db.rollback()
            logger.exception("Error creating block for walker %s", walker_id)
            raise
        logger.info(f"block_created block_id={block.id} walker_id={walker_id}")
        return block

    @staticmethod
    def delete_block(db: Session, tenant: TenantContext, block_id: UUID) -> None:
        repo = BlockRepository(db)
        block = repo.get_in_org(block_id, tenant.org_id)
        if not block:
            raise NotFoundError(f"Block not found: {block_id}", code="BLOCK_NOT_FOUND")
        require_self_or_admin(tenant, block.walker_id, "remove blocked time")
        try:
            repo.delete(block)
        except Exception:
            db.rollback()
            logger.exception("Error removing block %s", block_id)
            raise
