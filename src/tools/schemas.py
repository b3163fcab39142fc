"""Input contracts for the Ecuro tools.

Field names follow the upstream API (camelCase) so validated arguments can
be forwarded as-is with ``model_dump(mode="json", exclude_none=True)``.
Unknown fields are rejected.
"""

from __future__ import annotations

from datetime import date, time
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator


def _calendar_date(value: str) -> str:
    date.fromisoformat(value)
    return value


def _clock_time(value: str) -> str:
    time.fromisoformat(value)
    return value


# The pattern fixes the wire shape; the validators reject impossible
# values such as 2025-13-45 or 25:00:00.
IsoDate = Annotated[
    str, Field(pattern=r"^\d{4}-\d{2}-\d{2}$"), AfterValidator(_calendar_date)
]
IsoTime = Annotated[
    str, Field(pattern=r"^\d{2}:\d{2}:\d{2}$"), AfterValidator(_clock_time)
]
Phone = Annotated[str, Field(min_length=8)]
Cpf = Annotated[str, Field(pattern=r"^\d{3}\.?\d{3}\.?\d{3}-?\d{2}$")]

MAX_REPORT_WINDOW_DAYS = 31


class ToolArguments(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def payload(self, *, exclude: set[str] | None = None) -> dict[str, Any]:
        """Arguments as JSON-ready upstream fields, unset optionals omitted."""
        return self.model_dump(mode="json", exclude_none=True, exclude=exclude)


class NoArguments(ToolArguments):
    pass


# ── Appointments ─────────────────────────────────────────────────────


class CreateAppointment(ToolArguments):
    fullName: str = Field(..., min_length=2, description="Patient's full name")
    phoneNumber: Phone = Field(..., description="Patient's contact phone (e.g. 31999999999)")
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")
    date: IsoDate = Field(..., description="Appointment date, yyyy-MM-dd")
    time: IsoTime | None = Field(None, description="Appointment time, HH:MM:SS")
    dateOfBirth: IsoDate | None = Field(None, description="Patient's date of birth, yyyy-MM-dd")


class CreateAppointmentForDoctor(CreateAppointment):
    doctorId: UUID = Field(..., description="ID of the requested dentist (UUID)")


class UpdateAppointment(ToolArguments):
    appointmentId: UUID = Field(..., description="Appointment ID (UUID)")
    date: IsoDate | None = Field(None, description="New date, yyyy-MM-dd")
    time: IsoTime | None = Field(None, description="New time, HH:MM:SS")
    doctorId: UUID | None = Field(None, description="New dentist ID (UUID)")
    status: str | None = Field(None, min_length=1, description="New appointment status")
    notes: str | None = Field(None, description="Free-text notes for the appointment")


class PatientAppointments(ToolArguments):
    patientId: UUID = Field(..., description="Patient ID (UUID)")
    startDate: IsoDate | None = Field(None, description="Only appointments from this date")
    endDate: IsoDate | None = Field(None, description="Only appointments up to this date")


class DoctorAppointments(ToolArguments):
    doctorId: UUID = Field(..., description="Dentist ID (UUID)")
    startDate: IsoDate | None = Field(None, description="Only appointments from this date")
    endDate: IsoDate | None = Field(None, description="Only appointments up to this date")


class AppointmentById(ToolArguments):
    appointmentId: UUID = Field(..., description="Appointment ID (UUID)")


class ListReturns(ToolArguments):
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")
    startDate: IsoDate | None = Field(None, description="Window start, yyyy-MM-dd")
    endDate: IsoDate | None = Field(None, description="Window end, yyyy-MM-dd")


# ── Availability ─────────────────────────────────────────────────────


class SearchAvailability(ToolArguments):
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")
    startDate: str = Field(
        ..., min_length=1, description="Search start, ISO 8601 (e.g. 2025-06-15T10:00:00)",
    )
    endDate: str = Field(
        ..., min_length=1, description="Search end, ISO 8601 (e.g. 2025-06-22T18:00:00)",
    )
    duration: int = Field(60, gt=0, description="Appointment length in minutes")


class SpecialtyAvailability(ToolArguments):
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")
    specialtyId: UUID = Field(..., description="Specialty ID (UUID)")
    doctorId: UUID = Field(..., description="Dentist ID (UUID)")
    durationAware: bool = Field(True, description="Take the procedure length into account")


class DentistAvailability(ToolArguments):
    dentistId: UUID = Field(..., description="Dentist ID (UUID)")
    date: IsoDate = Field(..., description="Day to check, yyyy-MM-dd")


class ClinicBlockers(ToolArguments):
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")
    startDate: IsoDate | None = Field(None, description="Window start, yyyy-MM-dd")
    endDate: IsoDate | None = Field(None, description="Window end, yyyy-MM-dd")


class AvailableDates(ToolArguments):
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")
    doctorId: UUID | None = Field(None, description="Restrict to one dentist (UUID)")
    specialtyId: UUID | None = Field(None, description="Restrict to one specialty (UUID)")
    startDate: IsoDate | None = Field(None, description="Window start, yyyy-MM-dd")
    endDate: IsoDate | None = Field(None, description="Window end, yyyy-MM-dd")


# ── Patients ─────────────────────────────────────────────────────────


class PatientByPhone(ToolArguments):
    phone: Phone = Field(..., description="Patient's phone number (e.g. 31989354137)")


class PatientByCpf(ToolArguments):
    cpf: Cpf = Field(..., description="Patient's CPF, with or without punctuation")


class PatientById(ToolArguments):
    patientId: UUID = Field(..., description="Patient ID (UUID)")


class ListPatients(ToolArguments):
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")
    search: str | None = Field(None, min_length=1, description="Name, phone or CPF fragment")
    page: int = Field(1, ge=1, description="Page number")
    limit: int = Field(50, ge=1, le=200, description="Page size")


class ClinicScope(ToolArguments):
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")


class OnboardingEvent(ToolArguments):
    patientId: UUID = Field(..., description="Patient ID (UUID)")
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")
    event: str = Field(..., min_length=1, description="Onboarding step name")
    details: str | None = Field(None, description="Optional free-text details")


# ── Clinics & billing ────────────────────────────────────────────────


class ListClinics(ToolArguments):
    clinicId: UUID | None = Field(None, description="Return only this clinic (UUID)")


class ApiReport(ToolArguments):
    clinicId: UUID | None = Field(None, description="Restrict to one clinic (UUID)")
    startDate: IsoDate | None = Field(None, description="Report start, yyyy-MM-dd")
    endDate: IsoDate | None = Field(None, description="Report end, yyyy-MM-dd")
    nonApiExclusive: bool | None = Field(
        None, description="true to include appointments not created through the API",
    )

    @model_validator(mode="after")
    def _window_fits(self) -> ApiReport:
        if self.startDate and self.endDate:
            start = date.fromisoformat(self.startDate)
            end = date.fromisoformat(self.endDate)
            if end < start:
                raise ValueError("endDate must not be before startDate")
            if (end - start).days > MAX_REPORT_WINDOW_DAYS:
                raise ValueError(
                    f"the report window is limited to {MAX_REPORT_WINDOW_DAYS} days"
                )
        return self


BoletoStatus = Literal[
    "CREATED", "REGISTERED", "SETTLEMENT", "CANCELLED", "EXPIRED", "ERROR",
]


class ListBoletos(ToolArguments):
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")
    patientId: UUID | None = Field(None, description="Filter by patient (UUID)")
    dentistId: UUID | None = Field(None, description="Filter by dentist (UUID)")
    status: BoletoStatus | None = Field(None, description="Boleto status")
    dueSoon: Literal["today", "week", "month"] | None = Field(
        None, description="Boletos due today, this week or this month",
    )
    overdue: bool | None = Field(None, description="Only overdue boletos")
    minValue: float | None = Field(None, ge=0, description="Minimum amount")
    maxValue: float | None = Field(None, ge=0, description="Maximum amount")
    page: int = Field(1, ge=1, description="Page number")
    limit: int = Field(20, ge=1, le=100, description="Page size")


class CsvExport(ToolArguments):
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")
    startDate: IsoDate = Field(..., description="Export start, yyyy-MM-dd")
    endDate: IsoDate = Field(..., description="Export end, yyyy-MM-dd")


class ClinicLogo(ToolArguments):
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")


# ── Dentists (Supabase directory) ────────────────────────────────────


class DentistByName(ToolArguments):
    firstName: str = Field(..., min_length=1, description="Dentist's first name")
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")


class DentistBySpeciality(ToolArguments):
    specialityName: str = Field(
        ..., min_length=1, description="Specialty name, e.g. Ortodontia, Implante, Avaliação",
    )
    clinicId: UUID = Field(..., description="Clinic ID (UUID)")


# ── Communications ───────────────────────────────────────────────────


class MarkCommunicationRead(ToolArguments):
    communicationId: UUID = Field(..., description="Communication ID (UUID)")
