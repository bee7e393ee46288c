COMMUTE_ESTIMATE_PROMPT = """
I need to analyze a commute between two locations for a housing search application.

Request details:
- Home: {origin}
- Work: {destination}
- Travel mode: {travel_mode}

Provide an estimated commute analysis in the following JSON format:
{{
  "distance_km": 15.5,
  "duration_minutes": 25,
  "traffic_duration_minutes": 35,
  "analysis": "Brief analysis of the commute quality"
}}

Consider typical urban commute patterns and provide realistic estimates.
"""

LOCATION_SCORE_PROMPT = """
Get the walk score, bike score, transit score, and safety sentiment at these coordinates:
"latitude": "{latitude}", "longitude": "{longitude}"
Nearby address: {address}

Return ONLY JSON with the structure:
{{"walkScore": number, "bikeScore": number, "transitScore": number, "safetySentiment": "string"}}
Scores range from 0 to 100.
"""
