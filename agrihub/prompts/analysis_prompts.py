from __future__ import annotations

from ..schemas import FarmerProfile, PricePredictionInput, SoilTestInput


PLANT_LANGUAGE_NAMES = {
    "en": "English",
    "hi": "Hindi",
    "te": "Telugu",
}

PLANT_REPORT_OUTLINE = """# Plant Identification
- Common Name
- Scientific Name
- Family
- Variety/Cultivar

# Health Assessment
- Overall Status
- Confidence Level
- Key Indicators

# Visible Conditions
- Leaf Appearance
- Growth Pattern
- Issues Detected
- Notable Features

# Care Guidelines
## Light Requirements
## Watering Needs
## Environment
- Temperature
- Humidity
- Soil Type

## Additional Care
- Fertilization
- Pruning
- Special Care

If problems detected:
# Treatment Recommendations"""

PEST_ANALYSIS_PROMPT = """Analyze this pest image and provide detailed pest analysis in the following JSON format:

{
  "pestName": "Detailed pest name (common and scientific)",
  "threatLevel": "Low/Medium/High",
  "characteristics": "Detailed physical description",
  "behavior": "Pest behavior patterns",
  "lifeCycle": "Life cycle information",
  "symptoms": ["List of damage symptoms"],
  "affectedParts": "Plant parts affected",
  "spreadPattern": "How the pest spreads",
  "treatments": [
    {
      "name": "Treatment method name",
      "description": "Treatment description",
      "dosage": "Application dosage",
      "frequency": "Application frequency",
      "precautions": "Safety precautions"
    }
  ],
  "preventionMeasures": ["List of prevention measures"],
  "naturalEnemies": ["List of natural predators"],
  "recommendedProducts": [
    {
      "name": "Specific pesticide product name",
      "category": "Type of pesticide (e.g., Insecticide, Fungicide)",
      "type": "Usage type (e.g., Contact, Systemic)"
    }
  ]
}

Important:
- Provide comprehensive pest identification and analysis
- Include detailed treatment and prevention information
- Recommend 3-4 specific pesticide products
- Include both chemical and organic options if available
- Focus on products commonly available in India
- Ensure product names are specific and searchable"""

SOIL_RESPONSE_FORMAT = """Provide analysis in this JSON format:
{
  "healthScore": "overall soil health score out of 100",
  "summary": "brief summary of soil health",
  "nutrients": [
    {
      "name": "nutrient name",
      "level": "percentage level",
      "status": "status description"
    }
  ],
  "recommendations": [
    "detailed recommendation 1",
    "detailed recommendation 2"
  ],
  "suitableCrops": [
    "crop name 1",
    "crop name 2"
  ]
}"""

PRICE_OPTIONS_PROMPT = """Generate lists of options for vegetable price prediction form in this JSON format:
{
  "vegetables": ["list of common Indian vegetables"],
  "states": ["list of major agricultural Indian states"],
  "seasons": ["list of Indian agricultural seasons"],
  "qualityGrades": ["list of standard produce quality grades"],
  "marketTypes": ["list of different market types"]
}"""

PRICE_RESPONSE_FORMAT = """Return in JSON format:
{
  "currentPrice": 45,
  "predictions": [
    {
      "month": "January 2024",
      "price": 48,
      "change": 6.67,
      "supplyStatus": "Moderate",
      "demandTrend": "Increasing"
    }
  ],
  "marketFactors": [
    {
      "factor": "Weather Impact",
      "description": "Expected rainfall pattern affects cultivation"
    }
  ],
  "recommendations": [
    {
      "type": "Storage",
      "suggestion": "Consider cold storage if price drops below threshold"
    }
  ],
  "qualityPremium": "10% premium for Grade A quality",
  "marketInsights": "Higher prices expected in retail markets",
  "regionalTrends": "Northern regions show stronger demand"
}"""


def build_plant_prompt(language: str = "en") -> str:
    # unknown codes fall through to Telugu, as the language picker only offers three
    if language == "en":
        name = PLANT_LANGUAGE_NAMES["en"]
    elif language == "hi":
        name = PLANT_LANGUAGE_NAMES["hi"]
    else:
        name = PLANT_LANGUAGE_NAMES["te"]
    instruction = (
        f"Analyze this plant image and provide a detailed markdown response in {name}:"
    )
    return f"{instruction}\n{PLANT_REPORT_OUTLINE}"


def build_pest_prompt() -> str:
    return PEST_ANALYSIS_PROMPT


def build_soil_prompt(soil: SoilTestInput) -> str:
    readings = "\n".join(
        [
            f"pH: {soil.ph}",
            f"Nitrogen: {soil.nitrogen} mg/kg",
            f"Phosphorus: {soil.phosphorus} mg/kg",
            f"Potassium: {soil.potassium} mg/kg",
            f"Organic Matter: {soil.organic_matter}%",
            f"Texture: {soil.texture}",
            f"Moisture: {soil.moisture}%",
            f"Electrical Conductivity: {soil.conductivity} dS/m",
        ]
    )
    return (
        "Analyze these soil test results and provide detailed recommendations:\n"
        f"{readings}\n\n{SOIL_RESPONSE_FORMAT}"
    )


def _farmer_reply_entry(profile: FarmerProfile) -> str:
    return (
        "    {\n"
        f'      "author": "{profile.name}",\n'
        f'      "village": "{profile.village}",\n'
        f'      "experience": {profile.experience},\n'
        '      "content": "farmer\'s response here"\n'
        "    }"
    )


def build_forum_prompt(
    question: str, first: FarmerProfile, second: FarmerProfile
) -> str:
    entries = ",\n".join([_farmer_reply_entry(first), _farmer_reply_entry(second)])
    return (
        "You are simulating responses from two different Indian farmers to this "
        "farming-related question.\n"
        "Format the response as JSON with two responses from farmers with these profiles:\n\n"
        f"Farmer 1: {first.name} from {first.village} with {first.experience} years of experience\n"
        f"Farmer 2: {second.name} from {second.village} with {second.experience} years of experience\n\n"
        "Make their responses authentic, including local context, traditional knowledge, "
        "and practical experience.\n"
        "Each response should be 2-3 sentences in english.\n\n"
        f'Question: "{question}"\n\n'
        "Response format:\n"
        "{\n"
        '  "responses": [\n'
        f"{entries}\n"
        "  ]\n"
        "}"
    )


def build_price_options_prompt() -> str:
    return PRICE_OPTIONS_PROMPT


def build_price_prediction_prompt(selection: PricePredictionInput) -> str:
    lines = [
        f"- Vegetable: {selection.vegetable}",
        f"- State: {selection.state}",
        f"- Season: {selection.season}",
        f"- Quality: {selection.quality}",
        f"- Market: {selection.market_type}",
        f"- Duration: {selection.duration} months",
    ]
    return "Generate price predictions for:\n" + "\n".join(lines) + f"\n\n{PRICE_RESPONSE_FORMAT}"
