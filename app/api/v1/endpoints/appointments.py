"""Appointment endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Query, status

from app.dependencies import CacheManagerDep, CurrentUser, DatabaseSession, PublisherDep
from app.scheduling.visibility import AppointmentQuery
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
    AppointmentType,
    AppointmentUpdate,
    MessageResponse,
)
from app.services.appointment_service import AppointmentService
from app.services.schedule_service import ScheduleService, default_slots

router = APIRouter()


@router.get(
    "/available-slots",
    response_model=list[str],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Bookable time slots",
)
async def available_slots(
    db: DatabaseSession,
    cache_manager: CacheManagerDep,
    doctor: UUID | None = Query(None, description="Doctor ID"),
    day: date | None = Query(None, alias="date", description="Calendar date"),
) -> list[str]:
    """
    List bookable slot start times.

    Without both ``doctor`` and ``date`` the clinic-wide grid is returned;
    with both, the doctor's free slots on that date.
    """
    if doctor is None or day is None:
        return default_slots()

    service = ScheduleService(db, cache_manager)
    return await service.available_slots(doctor, day)


@router.get(
    "/today",
    response_model=list[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Today's active appointments",
)
async def todays_appointments(
    current_user: CurrentUser,
    db: DatabaseSession,
    publisher: PublisherDep,
) -> list[AppointmentResponse]:
    """List today's Scheduled and Confirmed appointments within the caller's scope."""
    today = date.today()
    service = AppointmentService(db, publisher)
    return await service.list_in_range(current_user, today, today, active_only=True)


@router.get(
    "/date-range/{start_date}/{end_date}",
    response_model=list[AppointmentResponse],
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Appointments in a date range",
)
async def appointments_in_range(
    start_date: date,
    end_date: date,
    current_user: CurrentUser,
    db: DatabaseSession,
    publisher: PublisherDep,
) -> list[AppointmentResponse]:
    """List appointments between two dates, inclusive, within the caller's scope."""
    service = AppointmentService(db, publisher)
    return await service.list_in_range(current_user, start_date, end_date)


@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Book appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    current_user: CurrentUser,
    db: DatabaseSession,
    publisher: PublisherDep,
) -> AppointmentResponse:
    """
    Book an appointment.

    Patients book for themselves; staff and doctors name the patient.

    Args:
        data: Booking request
        current_user: Authenticated user
        db: Database session
        publisher: Real-time event publisher

    Returns:
        Created appointment
    """
    service = AppointmentService(db, publisher)
    return await service.create_appointment(current_user, data)


@router.get(
    "/",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments",
)
async def list_appointments(
    current_user: CurrentUser,
    db: DatabaseSession,
    publisher: PublisherDep,
    appointment_date: date | None = Query(None, alias="date"),
    doctor: UUID | None = Query(None),
    patient: UUID | None = Query(None),
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    type_filter: AppointmentType | None = Query(None, alias="type"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> AppointmentListResponse:
    """
    List appointments visible to the authenticated user.

    Doctors only ever see their own appointments and patients only theirs;
    the ``doctor`` and ``patient`` filters apply to admins, nurses and
    receptionists.

    Args:
        current_user: Authenticated user
        db: Database session
        publisher: Real-time event publisher
        appointment_date: Filter by date
        doctor: Filter by doctor ID
        patient: Filter by patient ID
        status_filter: Filter by status
        type_filter: Filter by type
        page: Page number
        limit: Items per page

    Returns:
        Paginated list of appointments
    """
    requested = AppointmentQuery(
        doctor_id=doctor,
        patient_id=patient,
        appointment_date=appointment_date,
        status=status_filter.value if status_filter else None,
        type=type_filter.value if type_filter else None,
    )

    service = AppointmentService(db, publisher)
    return await service.list_appointments(current_user, requested, page, limit)


@router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
    publisher: PublisherDep,
) -> AppointmentResponse:
    """
    Get a specific appointment by ID.

    Raises:
        NotFoundException: If appointment not found
        ForbiddenException: If outside the caller's scope
    """
    service = AppointmentService(db, publisher)
    return await service.get_appointment(appointment_id, current_user)


@router.put(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Update appointment",
)
async def update_appointment(
    appointment_id: UUID,
    data: AppointmentUpdate,
    current_user: CurrentUser,
    db: DatabaseSession,
    publisher: PublisherDep,
) -> AppointmentResponse:
    """
    Update an existing appointment.

    Changing the doctor, date, time or duration reschedules it.
    """
    service = AppointmentService(db, publisher)
    return await service.update_appointment(appointment_id, current_user, data)


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Update appointment status",
)
@router.put(
    "/{appointment_id}/status",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    include_in_schema=False,
)
async def update_appointment_status(
    appointment_id: UUID,
    data: AppointmentStatusUpdate,
    current_user: CurrentUser,
    db: DatabaseSession,
    publisher: PublisherDep,
) -> AppointmentResponse:
    """
    Move an appointment to a new status.

    Raises:
        InvalidTransitionException: If the lifecycle forbids the change
    """
    service = AppointmentService(db, publisher)
    return await service.update_appointment_status(appointment_id, current_user, data)


@router.delete(
    "/{appointment_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Delete appointment",
)
async def delete_appointment(
    appointment_id: UUID,
    current_user: CurrentUser,
    db: DatabaseSession,
    publisher: PublisherDep,
) -> MessageResponse:
    """Permanently delete an appointment (admin only)."""
    service = AppointmentService(db, publisher)
    await service.delete_appointment(appointment_id, current_user)
    return MessageResponse(message="Appointment deleted successfully")
