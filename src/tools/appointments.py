"""Appointment tools: create, update and look up appointments."""

from __future__ import annotations

from src.services.ecuro_client import get_ecuro_client
from src.tools.registry import READ_ONLY, WRITE, ToolDescriptor, ToolOutcome, json_content
from src.tools.schemas import (
    AppointmentById,
    CreateAppointment,
    CreateAppointmentForDoctor,
    DoctorAppointments,
    ListReturns,
    PatientAppointments,
    UpdateAppointment,
)

# Discriminator the upstream root endpoint uses to route the POST.
CREATE_APPOINTMENT_METHOD = "create_appointment"


async def create_appointment(args: CreateAppointment) -> ToolOutcome:
    payload = {"method": CREATE_APPOINTMENT_METHOD, **args.payload()}
    return json_content(await get_ecuro_client().post("/", payload))


async def create_appointment_for_doctor(args: CreateAppointmentForDoctor) -> ToolOutcome:
    payload = {"method": CREATE_APPOINTMENT_METHOD, **args.payload()}
    return json_content(await get_ecuro_client().post("/", payload))


async def update_appointment(args: UpdateAppointment) -> ToolOutcome:
    return json_content(await get_ecuro_client().put("/update-appointment", args.payload()))


async def list_patient_appointments(args: PatientAppointments) -> ToolOutcome:
    result = await get_ecuro_client().get("/list-appointments-of-patient", args.payload())
    return json_content(result)


async def list_doctor_appointments(args: DoctorAppointments) -> ToolOutcome:
    result = await get_ecuro_client().get("/list-appointments-of-doctor", args.payload())
    return json_content(result)


async def get_appointment(args: AppointmentById) -> ToolOutcome:
    return json_content(await get_ecuro_client().get("/appointments/appid", args.payload()))


async def list_returns(args: ListReturns) -> ToolOutcome:
    return json_content(await get_ecuro_client().get("/list-returns", args.payload()))


def appointment_tools() -> list[ToolDescriptor]:
    return [
        ToolDescriptor(
            name="ecuro_create_appointment",
            title="Create Appointment",
            description=(
                "Create an assessment appointment at a clinic. The system assigns an "
                "available dentist automatically.\n\n"
                "Args: fullName, phoneNumber, clinicId (UUID), date (yyyy-MM-dd), "
                "optional time (HH:MM:SS) and dateOfBirth (yyyy-MM-dd).\n"
                "Returns: the created appointment with its ID and status."
            ),
            input_model=CreateAppointment,
            handler=create_appointment,
            annotations=WRITE,
        ),
        ToolDescriptor(
            name="ecuro_create_appointment_for_doctor",
            title="Create Appointment for a Specific Dentist",
            description=(
                "Same as ecuro_create_appointment, but books the appointment with the "
                "dentist given in doctorId (UUID)."
            ),
            input_model=CreateAppointmentForDoctor,
            handler=create_appointment_for_doctor,
            annotations=WRITE,
        ),
        ToolDescriptor(
            name="ecuro_update_appointment",
            title="Update Appointment",
            description=(
                "Change an existing appointment: date, time, dentist, status or notes. "
                "Only the fields provided are sent."
            ),
            input_model=UpdateAppointment,
            handler=update_appointment,
            annotations={**WRITE, "idempotentHint": True},
        ),
        ToolDescriptor(
            name="ecuro_list_patient_appointments",
            title="List Patient Appointments",
            description="List the appointments of a patient, optionally within a date window.",
            input_model=PatientAppointments,
            handler=list_patient_appointments,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_list_doctor_appointments",
            title="List Dentist Appointments",
            description="List the appointments booked with a dentist, optionally within a date window.",
            input_model=DoctorAppointments,
            handler=list_doctor_appointments,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_get_appointment",
            title="Get Appointment",
            description="Fetch a single appointment by its ID.",
            input_model=AppointmentById,
            handler=get_appointment,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_list_returns",
            title="List Return Visits",
            description=(
                "List patients due for a return visit at a clinic. Useful for "
                "follow-up campaigns."
            ),
            input_model=ListReturns,
            handler=list_returns,
            annotations=READ_ONLY,
        ),
    ]
