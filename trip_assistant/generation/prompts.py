"""
Prompt templates for itinerary generation.
"""

from datetime import datetime
from typing import Union


def build_system_prompt(max_events: int = 25) -> str:
    """Generation instructions, including the compact event schema."""
    return (
        "You are a travel itinerary generator. Given a trip description, dates, and name, "
        "generate a realistic set of placeholder events.\n"
        "\n"
        "Rules:\n"
        f"- Generate at most {max_events} events. Focus on key logistics "
        "(flights, transport, accommodation) and highlights.\n"
        + ITINERARY_RULES_AND_SCHEMA
    )


ITINERARY_RULES_AND_SCHEMA = """- For trips over 7 days, consolidate accommodation into multi-night stays when in the same city.
- Include only 1-2 notable meals per city, not every meal.
- Use REALISTIC times: flights at 08:00 or 18:00, activities 09:00-17:00, meals at 12:00 or 19:00. NEVER use midnight T00:00:00 for anything except multi-day accommodation check-in/check-out.
- Use real place names, attractions, and restaurants.

Return a JSON object with an "events" array. Use this COMPACT schema. Do NOT include redundant fields:

travel: { "category": "travel", "type": "flight"|"train"|"car"|"boat"|"bus", "title": "...", "departure": { "date": "ISO", "name": "...", "city": "...", "country": "..." }, "arrival": { "date": "ISO", "name": "...", "city": "...", "country": "..." } }

accommodation: { "category": "accommodation", "type": "hotel"|"hostel"|"airbnb", "title": "...", "checkIn": { "date": "ISO", "name": "...", "city": "...", "country": "..." }, "checkOut": { "date": "ISO", "name": "...", "city": "...", "country": "..." } }

experience: { "category": "experience", "type": "activity"|"tour"|"museum"|"concert", "title": "...", "startDate": "ISO", "endDate": "ISO", "name": "...", "city": "...", "country": "..." }

meal: { "category": "meal", "type": "restaurant", "title": "...", "date": "ISO", "name": "...", "city": "...", "country": "..." }

Do NOT include "start", "end", "location", or nested "location" objects; they will be derived automatically."""


def build_user_prompt(
    trip_name: str,
    start_date: Union[str, datetime],
    end_date: Union[str, datetime],
    description: str,
) -> str:
    return f"""Generate a complete trip itinerary for the following:

Trip Name: {trip_name}
Start Date: {start_date}
End Date: {end_date}
Description: {description}

Return ONLY a valid JSON object with an "events" array. Do not include any text before or after the JSON."""
