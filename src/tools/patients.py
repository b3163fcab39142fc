"""Patient tools: lookups, listings and onboarding events."""

from __future__ import annotations

from src.services.ecuro_client import get_ecuro_client
from src.tools.registry import READ_ONLY, WRITE, ToolDescriptor, ToolOutcome, json_content
from src.tools.schemas import (
    ClinicScope,
    ListPatients,
    OnboardingEvent,
    PatientByCpf,
    PatientById,
    PatientByPhone,
)


async def get_patient_by_phone(args: PatientByPhone) -> ToolOutcome:
    return json_content(await get_ecuro_client().post("/get-patient-by-phone", args.payload()))


async def get_patient_by_cpf(args: PatientByCpf) -> ToolOutcome:
    return json_content(await get_ecuro_client().get("/get-patient-by-cpf", args.payload()))


async def patient_details(args: PatientById) -> ToolOutcome:
    return json_content(await get_ecuro_client().get("/patient-details", args.payload()))


async def list_patients(args: ListPatients) -> ToolOutcome:
    return json_content(await get_ecuro_client().get("/list-patients", args.payload()))


async def incomplete_treatments(args: PatientById) -> ToolOutcome:
    result = await get_ecuro_client().get("/patient-incomplete-treatments", args.payload())
    return json_content(result)


async def orthodontic_patients(args: ClinicScope) -> ToolOutcome:
    return json_content(await get_ecuro_client().get("/orto-patients", args.payload()))


async def register_onboarding_event(args: OnboardingEvent) -> ToolOutcome:
    return json_content(await get_ecuro_client().post("/onboarding-event", args.payload()))


def patient_tools() -> list[ToolDescriptor]:
    return [
        ToolDescriptor(
            name="ecuro_get_patient_by_phone",
            title="Find Patient by Phone",
            description=(
                "Look up a registered patient by phone number. Use it to check whether "
                "the patient already exists before booking."
            ),
            input_model=PatientByPhone,
            handler=get_patient_by_phone,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_get_patient_by_cpf",
            title="Find Patient by CPF",
            description="Look up a registered patient by CPF (Brazilian taxpayer ID).",
            input_model=PatientByCpf,
            handler=get_patient_by_cpf,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_patient_details",
            title="Patient Details",
            description="Full registration data of a patient: contact, birth date, clinic, notes.",
            input_model=PatientById,
            handler=patient_details,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_list_patients",
            title="List Patients",
            description="Paginated list of a clinic's patients, optionally filtered by a search term.",
            input_model=ListPatients,
            handler=list_patients,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_patient_incomplete_treatments",
            title="Incomplete Treatments",
            description="Treatments approved for a patient that still have procedures to execute.",
            input_model=PatientById,
            handler=incomplete_treatments,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_orthodontic_patients",
            title="Orthodontic Patients",
            description="Patients of a clinic with an active orthodontic treatment.",
            input_model=ClinicScope,
            handler=orthodontic_patients,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_register_onboarding_event",
            title="Register Onboarding Event",
            description="Record a step of a patient's onboarding journey (e.g. first contact, welcome message).",
            input_model=OnboardingEvent,
            handler=register_onboarding_event,
            annotations=WRITE,
        ),
    ]
