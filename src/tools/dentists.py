"""Dentist lookup tools backed by the Supabase directory.

An empty result is not an error: the tools answer with a sentence the
agent can relay to the patient.
"""

from __future__ import annotations

from src.services.dentist_directory import get_dentist_directory
from src.tools.registry import (
    READ_ONLY,
    Content,
    ToolDescriptor,
    ToolOutcome,
    json_content,
)
from src.tools.schemas import ClinicScope, DentistByName, DentistBySpeciality

ASSESSMENT_SPECIALITY = "Avaliação"

# The directory is our own data, not the open upstream API.
DIRECTORY = {**READ_ONLY, "openWorldHint": False}


async def dentist_by_name(args: DentistByName) -> ToolOutcome:
    rows = await get_dentist_directory().query(
        firstName=args.firstName, clinic_id=str(args.clinicId),
    )
    if not rows:
        return Content(
            f'Nenhum dentista encontrado com o nome "{args.firstName}" na clínica informada.'
        )
    return json_content(rows)


async def dentist_by_speciality(args: DentistBySpeciality) -> ToolOutcome:
    rows = await get_dentist_directory().query(
        speciality_name=args.specialityName, clinic_id=str(args.clinicId),
    )
    if not rows:
        return Content(
            f'Nenhum dentista encontrado para a especialidade "{args.specialityName}" '
            "na clínica informada."
        )
    return json_content(rows)


async def dentist_for_assessment(args: ClinicScope) -> ToolOutcome:
    rows = await get_dentist_directory().query(
        speciality_name=ASSESSMENT_SPECIALITY, clinic_id=str(args.clinicId),
    )
    if not rows:
        return Content("Nenhum dentista de avaliação encontrado para a clínica informada.")
    return json_content(rows)


def dentist_tools() -> list[ToolDescriptor]:
    return [
        ToolDescriptor(
            name="ecuro_get_dentist_by_name",
            title="Find Dentist by Name",
            description=(
                "Find dentists by first name within one clinic. Returns the dentist "
                "rows with IDs, specialties and clinic_id."
            ),
            input_model=DentistByName,
            handler=dentist_by_name,
            annotations=DIRECTORY,
        ),
        ToolDescriptor(
            name="ecuro_get_dentist_by_speciality",
            title="Find Dentists by Specialty",
            description=(
                "Dentists of a clinic who treat a given specialty "
                "(e.g. Ortodontia, Implante, Endodontia), with their IDs."
            ),
            input_model=DentistBySpeciality,
            handler=dentist_by_speciality,
            annotations=DIRECTORY,
        ),
        ToolDescriptor(
            name="ecuro_get_dentist_for_assessment",
            title="Find Assessment Dentists",
            description=(
                "Dentists of a clinic who run initial assessment appointments "
                "(specialty \"Avaliação\")."
            ),
            input_model=ClinicScope,
            handler=dentist_for_assessment,
            annotations=DIRECTORY,
        ),
    ]
