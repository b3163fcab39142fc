"""Clinic, reporting and billing tools.

Most tools return pretty-printed JSON.  Two are different: the CSV export
returns the upstream text untouched, and the logo is returned as a
``data:<mime>;base64,...`` URI.
"""

from __future__ import annotations

from src.services.ecuro_client import get_ecuro_client
from src.tools.registry import (
    READ_ONLY,
    Content,
    ToolDescriptor,
    ToolOutcome,
    json_content,
)
from src.tools.schemas import (
    ApiReport,
    ClinicLogo,
    ClinicScope,
    CsvExport,
    ListBoletos,
    ListClinics,
    NoArguments,
)


async def list_clinics(args: ListClinics) -> ToolOutcome:
    return json_content(await get_ecuro_client().get("/list-clinics", args.payload()))


async def list_specialties(args: NoArguments) -> ToolOutcome:
    return json_content(await get_ecuro_client().get("/list-specialties"))


async def active_dentists(args: ClinicScope) -> ToolOutcome:
    return json_content(await get_ecuro_client().post("/active-dentists", args.payload()))


async def api_report(args: ApiReport) -> ToolOutcome:
    return json_content(await get_ecuro_client().get("/apireport", args.payload()))


async def list_boletos(args: ListBoletos) -> ToolOutcome:
    return json_content(await get_ecuro_client().post("/list-boletos", args.payload()))


async def export_csv(args: CsvExport) -> ToolOutcome:
    text = await get_ecuro_client().get_text("/csv", args.payload())
    return Content(text)


async def clinic_logo(args: ClinicLogo) -> ToolOutcome:
    data_uri = await get_ecuro_client().get_binary_as_data_uri(f"/logo/{args.clinicId}")
    return Content(data_uri)


def clinic_tools() -> list[ToolDescriptor]:
    return [
        ToolDescriptor(
            name="ecuro_list_clinics",
            title="List Clinics",
            description=(
                "List the registered clinics (name, ID, address, public code). "
                "Pass clinicId to get a single clinic."
            ),
            input_model=ListClinics,
            handler=list_clinics,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_list_specialties",
            title="List Specialties",
            description="All dental specialties known to the system, with IDs and names.",
            input_model=NoArguments,
            handler=list_specialties,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_active_dentists",
            title="Active Dentists",
            description="Dentists currently working at a clinic, with their IDs and specialties.",
            input_model=ClinicScope,
            handler=active_dentists,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_api_report",
            title="Appointments Report",
            description=(
                "Detailed appointment report with financial data: clinic, patient "
                "(CPF, phone, channel), balance (payments, approved, executed, "
                "opportunities) and appointment details.\n\n"
                "Defaults to the last 31 days and API-created appointments only; set "
                "nonApiExclusive=true for all. At most 31 days between startDate and endDate."
            ),
            input_model=ApiReport,
            handler=api_report,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_list_boletos",
            title="List Boletos",
            description=(
                "List a clinic's boletos (bank slips) with filters: patient, dentist, "
                "status, due soon (today/week/month), overdue, min/max value. "
                "Paginated. Returns amount, due date, status, patient name and PDF links."
            ),
            input_model=ListBoletos,
            handler=list_boletos,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_export_csv",
            title="Export Appointments CSV",
            description="Export a clinic's appointments between two dates as raw CSV text.",
            input_model=CsvExport,
            handler=export_csv,
            annotations=READ_ONLY,
        ),
        ToolDescriptor(
            name="ecuro_clinic_logo",
            title="Clinic Logo",
            description="The clinic's logo as a data URI (data:<mime>;base64,...).",
            input_model=ClinicLogo,
            handler=clinic_logo,
            annotations=READ_ONLY,
        ),
    ]
