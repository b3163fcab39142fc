"""Availability tools: free slots, dentist agendas, clinic blockers."""

from __future__ import annotations

from src.services.ecuro_client import get_ecuro_client
from src.tools.registry import READ_ONLY, ToolDescriptor, ToolOutcome, json_content
from src.tools.schemas import (
    AvailableDates,
    ClinicBlockers,
    DentistAvailability,
    SearchAvailability,
    SpecialtyAvailability,
)


async def search_availability(args: SearchAvailability) -> ToolOutcome:
    result = await get_ecuro_client().get("/specialty-availability", args.payload())
    return json_content(result)


async def specialty_availability(args: SpecialtyAvailability) -> ToolOutcome:
    result = await get_ecuro_client().get("/specialty-availability", args.payload())
    return json_content(result)


async def dentist_availability(args: DentistAvailability) -> ToolOutcome:
    # The upstream path really is spelled "availabilty".
    result = await get_ecuro_client().post("/dentist-availabilty", args.payload())
    return json_content(result)


async def clinic_blockers(args: ClinicBlockers) -> ToolOutcome:
    return json_content(await get_ecuro_client().get("/blockers-for-a-clinic", args.payload()))


async def available_dates(args: AvailableDates) -> ToolOutcome:
    return json_content(await get_ecuro_client().get("/dates", args.payload()))


def availability_tools() -> list[ToolDescriptor]:
    return [
        ToolDescriptor(
            name="ecuro_search_availability",
            title="Search Clinic Availability",
            description=(
                "Find free slots in the clinic's agenda between startDate and endDate "
                "(ISO 8601) for an appointment of `duration` minutes (default 60). "
                "Use it to suggest times to the patient."
            ),
            input_model=SearchAvailability,
            handler=search_availability,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_specialty_availability",
            title="Search Availability by Specialty",
            description=(
                "Free slots for a specialty and dentist, taking the procedure length "
                "into account unless durationAware is false."
            ),
            input_model=SpecialtyAvailability,
            handler=specialty_availability,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_dentist_availability",
            title="Dentist Agenda for a Day",
            description=(
                "Booked slots of a dentist on a given day (start/end time, patient, "
                "status). Times not listed are free."
            ),
            input_model=DentistAvailability,
            handler=dentist_availability,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_clinic_blockers",
            title="Clinic Agenda Blockers",
            description="Blocked periods (holidays, meetings, closures) in a clinic's agenda.",
            input_model=ClinicBlockers,
            handler=clinic_blockers,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_available_dates",
            title="Available Dates",
            description=(
                "Days with at least one free slot at a clinic, optionally narrowed to a "
                "dentist or specialty."
            ),
            input_model=AvailableDates,
            handler=available_dates,
            annotations=READ_ONLY,
        ),
    ]
