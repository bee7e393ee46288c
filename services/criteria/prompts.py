FILTER_EXTRACTION_PROMPT = """
Extract deterministic filters from this housing search query: "{query}"

Respond with ONLY a JSON object (no other text):
{{
  "minPrice": number or null,
  "maxPrice": number or null,
  "minBedrooms": number or null,
  "maxBedrooms": number or null,
  "minBathrooms": number or null,
  "maxBathrooms": number or null,
  "housingType": "house" | "apartment" | "condo" | null,
  "privateRoom": boolean or null,
  "privateBath": boolean or null,
  "smoking": boolean or null
}}

Examples:
"Find houses under $2000" -> {{"maxPrice": 2000, "housingType": "house"}}
"Show me 2+ bedroom apartments" -> {{"minBedrooms": 2, "housingType": "apartment"}}
"Private bath required, no smoking" -> {{"privateBath": true, "smoking": false}}

Do not extract location filters; location matching is handled by commute scoring.
"""

RESIDUAL_REQUIREMENT_PROMPT = """
Does this query contain natural language requirements that can't be handled by deterministic filters?

Query: "{query}"

Deterministic filters can handle: price, bedrooms, bathrooms, housing type, private room/bath, smoking, location.

Natural language requirements include: roommate gender/age, lifestyle preferences, personality traits, cleanliness, social preferences, etc.

Respond with ONLY: yes or no
"""
