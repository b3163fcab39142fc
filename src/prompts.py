"""Server instructions sent to MCP clients in the ``initialize`` result."""

SERVER_INSTRUCTIONS = """Tools for the Ecuro Light dental scheduling system.

## Conventions
- IDs (clinics, dentists, patients, appointments) are UUIDs. Get them from
  ecuro_list_clinics, ecuro_active_dentists or the patient lookups; never invent one.
- Dates are yyyy-MM-dd, times are HH:MM:SS. Availability searches take ISO 8601
  date-times.

## Booking flow
1. Find the patient with ecuro_get_patient_by_phone (or ecuro_get_patient_by_cpf).
2. Check free slots with ecuro_search_availability, or ecuro_specialty_availability
   when the patient asked for a specific specialty and dentist.
3. Book with ecuro_create_appointment, or ecuro_create_appointment_for_doctor when a
   dentist was chosen.

## Errors
A tool result flagged as an error carries the Ecuro API status and message.
Explain it to the user in plain words; do not retry the same call blindly.
"""
