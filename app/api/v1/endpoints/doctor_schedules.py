"""Doctor schedule endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.core.exceptions import ForbiddenException
from app.dependencies import CacheManagerDep, CurrentUser, DatabaseSession
from app.scheduling.visibility import UserRole
from app.schemas.doctor_schedules import DoctorScheduleResponse, DoctorScheduleUpdate
from app.services.schedule_service import ScheduleService

router = APIRouter(prefix="/doctor-schedules", tags=["Doctor Schedules"])


def _ensure_can_manage(current_user: dict, doctor_id: UUID) -> None:
    if current_user["role"] != UserRole.ADMIN.value and current_user["id"] != doctor_id:
        raise ForbiddenException("Only administrators or the doctor can manage this schedule")


@router.get(
    "/{doctor_id}",
    response_model=DoctorScheduleResponse,
    status_code=status.HTTP_200_OK,
    summary="Get doctor schedule",
)
async def get_doctor_schedule(
    doctor_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> DoctorScheduleResponse:
    """Get a doctor's working week; doctors without one get the default."""
    _ensure_can_manage(current_user, doctor_id)
    return await ScheduleService(db, cache_manager).get_schedule(doctor_id)


@router.put(
    "/{doctor_id}",
    response_model=DoctorScheduleResponse,
    status_code=status.HTTP_200_OK,
    summary="Replace doctor schedule",
)
async def update_doctor_schedule(
    doctor_id: UUID,
    data: DoctorScheduleUpdate,
    current_user: CurrentUser,
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
) -> DoctorScheduleResponse:
    """Create or replace a doctor's working week."""
    _ensure_can_manage(current_user, doctor_id)
    return await ScheduleService(db, cache_manager).update_schedule(doctor_id, data)
