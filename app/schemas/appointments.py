"""Appointment schemas for request/response validation."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from app.scheduling.lifecycle import AppointmentStatus
from app.schemas.users import UserSummary

__all__ = [
    "AppointmentCreate",
    "AppointmentListResponse",
    "AppointmentPriority",
    "AppointmentResponse",
    "AppointmentStatus",
    "AppointmentStatusUpdate",
    "AppointmentType",
    "AppointmentUpdate",
    "Department",
    "MessageResponse",
    "Pagination",
    "PaymentStatus",
    "PrescriptionItem",
]


class AppointmentType(str, Enum):
    """Appointment type enumeration."""

    CONSULTATION = "Consultation"
    FOLLOW_UP = "Follow-up"
    EMERGENCY = "Emergency"
    SURGERY = "Surgery"
    CHECK_UP = "Check-up"
    VACCINATION = "Vaccination"


class AppointmentPriority(str, Enum):
    """Appointment priority enumeration."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    EMERGENCY = "Emergency"


class Department(str, Enum):
    """Clinical department enumeration."""

    EMERGENCY = "Emergency"
    CARDIOLOGY = "Cardiology"
    NEUROLOGY = "Neurology"
    PEDIATRICS = "Pediatrics"
    ORTHOPEDICS = "Orthopedics"
    GENERAL_MEDICINE = "General Medicine"
    SURGERY = "Surgery"
    ICU = "ICU"


class PaymentStatus(str, Enum):
    """Payment status enumeration."""

    PENDING = "Pending"
    PAID = "Paid"
    PARTIAL = "Partial"
    WAIVED = "Waived"


class PrescriptionItem(BaseModel):
    """Single prescribed medicine."""

    medicine: str = Field(..., min_length=1, max_length=200)
    dosage: str | None = Field(None, max_length=100)
    frequency: str | None = Field(None, max_length=100)
    duration: str | None = Field(None, max_length=100)
    instructions: str | None = Field(None, max_length=500)


class AppointmentCreate(BaseModel):
    """
    Schema for booking an appointment.

    ``appointment_time`` and ``duration_minutes`` are only type-checked here;
    range, format and calendar rules are applied by the booking validation
    before the conflict check.
    """

    doctor_id: UUID
    patient_id: UUID | None = Field(
        None, description="Required when staff book on behalf of a patient"
    )
    appointment_date: date
    appointment_time: str = Field(..., max_length=5, description="Start time, HH:MM (24-hour)")
    duration_minutes: int | None = Field(None, description="Length in minutes (15-120)")
    reason: str = Field("General consultation", min_length=1, max_length=500)
    type: AppointmentType = AppointmentType.CONSULTATION
    priority: AppointmentPriority = AppointmentPriority.MEDIUM
    department: Department = Department.GENERAL_MEDICINE
    symptoms: list[str] = Field(default_factory=list)
    notes: str | None = Field(None, max_length=1000)
    room_number: str | None = Field(None, max_length=20)
    follow_up_required: bool = False
    follow_up_date: date | None = None
    insurance_covered: bool = False
    cost: Decimal = Field(Decimal("0"), ge=0)


class AppointmentUpdate(BaseModel):
    """Schema for editing an appointment; changing the slot reschedules it."""

    doctor_id: UUID | None = None
    appointment_date: date | None = None
    appointment_time: str | None = Field(None, max_length=5)
    duration_minutes: int | None = None
    reason: str | None = Field(None, min_length=1, max_length=500)
    type: AppointmentType | None = None
    priority: AppointmentPriority | None = None
    department: Department | None = None
    symptoms: list[str] | None = None
    diagnosis: str | None = Field(None, max_length=2000)
    treatment: str | None = Field(None, max_length=2000)
    prescription: list[PrescriptionItem] | None = None
    notes: str | None = Field(None, max_length=1000)
    room_number: str | None = Field(None, max_length=20)
    follow_up_required: bool | None = None
    follow_up_date: date | None = None
    insurance_covered: bool | None = None
    cost: Decimal | None = Field(None, ge=0)
    payment_status: PaymentStatus | None = None


class AppointmentStatusUpdate(BaseModel):
    """Schema for updating appointment status."""

    status: AppointmentStatus
    notes: str | None = Field(None, max_length=1000)


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    id: UUID
    appointment_number: str
    patient_id: UUID
    doctor_id: UUID
    patient: UserSummary | None = None
    doctor: UserSummary | None = None
    appointment_date: date
    appointment_time: str
    end_time: str
    duration_minutes: int
    status: AppointmentStatus
    type: AppointmentType
    priority: AppointmentPriority
    department: Department | None = None
    reason: str
    symptoms: list[str] | None = None
    diagnosis: str | None = None
    treatment: str | None = None
    prescription: list[PrescriptionItem] | None = None
    notes: str | None = None
    follow_up_required: bool
    follow_up_date: date | None = None
    room_number: str | None = None
    insurance_covered: bool
    cost: Decimal
    payment_status: PaymentStatus
    created_by: str
    created_at: datetime
    updated_at: datetime
    cancelled_at: datetime | None = None

    model_config = {"from_attributes": True}


class Pagination(BaseModel):
    """Pagination block of a list response."""

    current_page: int
    total_pages: int
    total_appointments: int
    has_next: bool
    has_prev: bool


class AppointmentListResponse(BaseModel):
    """Schema for paginated appointment list response."""

    appointments: list[AppointmentResponse]
    pagination: Pagination


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
