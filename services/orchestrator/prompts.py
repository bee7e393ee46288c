QUERY_ANALYSIS_PROMPT = """
Analyze this user query for a housing search system and extract the intent and parameters:

Query: "{query}"

Determine:
1. Primary intent (housing_search, commute_analysis, market_summary, or combined_search)
2. Housing criteria (if any)
3. Commute criteria (if any)
4. Confidence level (0-1)

Respond with ONLY a JSON object:
{{
  "intent": "housing_search|commute_analysis|market_summary|combined_search",
  "housingCriteria": {{
    "query": "cleaned housing search query",
    "filters": {{
      "minPrice": number or null,
      "maxPrice": number or null,
      "minBedrooms": number or null,
      "maxBedrooms": number or null,
      "housingType": "house|apartment|condo" or null,
      "privateRoom": boolean or null,
      "privateBath": boolean or null,
      "smoking": boolean or null
    }}
  }},
  "commuteCriteria": {{
    "workLocation": "extracted work/destination location",
    "travelMode": "driving|walking|cycling|transit" or null,
    "maxDistance": number or null,
    "maxTime": number or null
  }},
  "confidence": 0.95,
  "explanation": "Brief explanation of the analysis"
}}

Examples:
- "Find apartments under $2000" -> intent: "housing_search", no commute criteria
- "Places with easy commute to Stanford" -> intent: "combined_search", workLocation: "Stanford"
- "Show me market summary" -> intent: "market_summary"
- "Rooms near 123 Main St with private bath" -> intent: "combined_search", workLocation: "123 Main St"

Extract work locations from patterns like:
- "commute to X", "close to X", "near X", "work at X"
- Street addresses (e.g., "230 Bay Pl", "123 Main Street")
- Company names, universities, landmarks
"""
