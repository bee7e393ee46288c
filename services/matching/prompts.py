SEMANTIC_SCORING_PROMPT = """
You are analyzing housing listings for this query: "{query}"

Rate each listing 0-100 based on how well it matches the query requirements. Focus on:
- Roommate preferences (gender, age, lifestyle)
- Living situation compatibility
- Social preferences
- Cleanliness and habits
- Any specific requirements mentioned

Listings to analyze:
{listings}

Respond with ONLY a JSON array of objects (no other text):
[
  {{
    "index": 1,
    "score": 85,
    "reason": "Explain WHY this score was given - mention specific factors from the listing that match or don't match the query"
  }}
]

In the "reason" field, be specific about what in the listing description, title, or details led to that score.

Only include listings with scores >= {score_floor}.
"""

LISTING_BLOCK = """
{position}. {title}
   Price: ${price}
   Location: {location}
   Type: {housing_type}, {bedrooms}BR/{bathrooms}BA
   Private Room: {private_room}
   Private Bath: {private_bath}
   Smoking: {smoking}
   Description: {description}
"""
