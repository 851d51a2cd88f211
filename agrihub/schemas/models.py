from __future__ import annotations

import base64
import mimetypes
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.normalizers import EnumNormalizer, ThreatLevel


class _CamelModel(BaseModel):
    """Accepts both the camelCase keys the model replies with and snake_case."""

    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------- requests


class ImageUpload(BaseModel):
    """An image picked from disk, dropped on the page, or captured by a camera."""

    filename: str
    mime_type: str
    data: bytes = Field(repr=False)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageUpload":
        path = Path(path)
        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            mime_type=mime_type or "application/octet-stream",
            data=path.read_bytes(),
        )

    @property
    def is_image(self) -> bool:
        return (self.mime_type or "").lower().startswith("image/")

    def to_inline_data(self) -> Dict[str, str]:
        return {
            "mimeType": self.mime_type,
            "data": base64.b64encode(self.data).decode("ascii"),
        }


class GenerationConfig(_CamelModel):
    temperature: float = 0.4
    top_k: int = Field(default=32, alias="topK")
    top_p: float = Field(default=1.0, alias="topP")
    max_output_tokens: int = Field(default=2048, alias="maxOutputTokens")

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class SoilTestInput(_CamelModel):
    """Raw soil form values; every field must be filled in before analysis."""

    ph: str = Field(default="", alias="pH")
    nitrogen: str = ""
    phosphorus: str = ""
    potassium: str = ""
    organic_matter: str = Field(default="", alias="organicMatter")
    texture: str = ""
    moisture: str = ""
    conductivity: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()


class PricePredictionInput(_CamelModel):
    vegetable: str = ""
    state: str = ""
    season: str = ""
    quality: str = ""
    market_type: str = Field(default="", alias="marketType")
    duration: int = 3


class ForumQuestion(BaseModel):
    question: str


class RentalQuoteRequest(BaseModel):
    days: Union[int, str, None] = None


class ProposalRequest(BaseModel):
    price: Union[int, float]


class DonationRequest(BaseModel):
    amount: Union[int, float, str]
    message: str = ""


class SpeechVoice(BaseModel):
    id: str
    name: str = ""
    lang: str = ""


class SpeechPrepareRequest(BaseModel):
    title: str = ""
    content: str
    language: str = "en"
    voices: List[SpeechVoice] = Field(default_factory=list)


# ---------------------------------------------------------- analysis shapes


class ResultSection(BaseModel):
    title: str
    content: str
    icon: str = "sun"


class PestTreatment(_CamelModel):
    name: str = ""
    description: str = ""
    dosage: str = ""
    frequency: str = ""
    precautions: str = ""


class PestProduct(_CamelModel):
    name: str = ""
    category: str = ""
    type: str = ""


class PestReport(_CamelModel):
    pest_name: str = Field(alias="pestName")
    threat_level: str = Field(default="", alias="threatLevel")
    characteristics: str = ""
    behavior: str = ""
    life_cycle: str = Field(default="", alias="lifeCycle")
    symptoms: List[str] = Field(default_factory=list)
    affected_parts: str = Field(default="", alias="affectedParts")
    spread_pattern: str = Field(default="", alias="spreadPattern")
    treatments: List[PestTreatment] = Field(default_factory=list)
    prevention_measures: List[str] = Field(default_factory=list, alias="preventionMeasures")
    natural_enemies: List[str] = Field(default_factory=list, alias="naturalEnemies")
    recommended_products: List[PestProduct] = Field(
        default_factory=list, alias="recommendedProducts"
    )

    @field_validator("threat_level", mode="before")
    @classmethod
    def normalize_threat_level(cls, value: Any) -> Any:
        if value is None:
            return ""
        return EnumNormalizer.normalize(ThreatLevel, value)


class SoilNutrient(_CamelModel):
    name: str
    level: str = ""
    status: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def level_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class SoilReport(_CamelModel):
    health_score: str = Field(alias="healthScore")
    summary: str = ""
    nutrients: List[SoilNutrient] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    suitable_crops: List[str] = Field(default_factory=list, alias="suitableCrops")

    @field_validator("health_score", mode="before")
    @classmethod
    def score_as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class FarmerProfile(BaseModel):
    name: str
    village: str
    experience: int


class FarmerResponse(_CamelModel):
    author: str
    village: str = ""
    experience: int = 0
    content: str


class ForumReply(_CamelModel):
    responses: List[FarmerResponse] = Field(min_length=1)


class ForumMessage(BaseModel):
    author: str
    content: str


class ForumThread(BaseModel):
    question: ForumMessage
    responses: List[FarmerResponse] = Field(default_factory=list)
    likes: int = 0
    liked: bool = False


class PriceOptions(_CamelModel):
    vegetables: List[str] = Field(default_factory=list)
    states: List[str] = Field(default_factory=list)
    seasons: List[str] = Field(default_factory=list)
    quality_grades: List[str] = Field(default_factory=list, alias="qualityGrades")
    market_types: List[str] = Field(default_factory=list, alias="marketTypes")


class MonthlyPrediction(_CamelModel):
    month: str
    price: float
    change: float = 0.0
    supply_status: str = Field(default="", alias="supplyStatus")
    demand_trend: str = Field(default="", alias="demandTrend")


class MarketFactor(_CamelModel):
    factor: str
    description: str = ""


class PriceRecommendation(_CamelModel):
    type: str
    suggestion: str = ""


class PricePrediction(_CamelModel):
    current_price: float = Field(alias="currentPrice")
    predictions: List[MonthlyPrediction] = Field(default_factory=list)
    market_factors: List[MarketFactor] = Field(default_factory=list, alias="marketFactors")
    recommendations: List[PriceRecommendation] = Field(default_factory=list)
    quality_premium: str = Field(default="", alias="qualityPremium")
    market_insights: str = Field(default="", alias="marketInsights")
    regional_trends: str = Field(default="", alias="regionalTrends")


class AnalysisOutcome(BaseModel):
    """Result of one structured AI request, whatever the page."""

    name: str
    status: Literal["ok", "degraded", "failed"]
    data: Dict[str, Any] = Field(default_factory=dict)
    sections: List[ResultSection] = Field(default_factory=list)
    raw_text: str = ""
    error: Optional[str] = None
    error_kind: Optional[Literal["invalid_input", "upstream", "malformed"]] = None
    progress: List[int] = Field(default_factory=list)
    notices: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status != "failed"


# ------------------------------------------------------------ marketplace


class EquipmentListing(_CamelModel):
    id: int
    name: str
    type: str
    location: str
    specs: Dict[str, Union[str, int]] = Field(default_factory=dict)
    price_per_day: int = Field(alias="pricePerDay")
    features: List[str] = Field(default_factory=list)
    availability: str = ""
    owner_name: str = Field(alias="ownerName")
    phone: str = ""
    email: str = ""
    min_days: int = Field(alias="minDays")
    max_days: int = Field(alias="maxDays")

    @property
    def size_label(self) -> str:
        for key in ("power", "width", "capacity"):
            if key in self.specs:
                return str(self.specs[key])
        return ""


class LandListing(_CamelModel):
    id: int
    title: str
    location: str
    area: float
    price_per_acre: int = Field(alias="pricePerAcre")
    soil_type: str = Field(alias="soilType")
    lease_duration: int = Field(alias="leaseDuration")
    features: List[str] = Field(default_factory=list)
    owner_name: str = Field(alias="ownerName")
    phone: str = ""
    email: str = ""


class FarmerCase(_CamelModel):
    id: int
    name: str
    age: int
    location: str
    family_size: int = Field(alias="familySize")
    land_size: float = Field(alias="landSize")
    amount_needed: int = Field(alias="amountNeeded")
    amount_raised: int = Field(alias="amountRaised")
    story: str
    deadline: date
    supporters: int = 0
    verified_by: str = Field(default="", alias="verifiedBy")


class SharePayload(BaseModel):
    title: str
    text: str
    url: str


class RentalQuote(_CamelModel):
    equipment_id: int = Field(alias="equipmentId")
    days: int
    price_per_day: int = Field(alias="pricePerDay")
    total: int
    message: str


class NegotiationResult(_CamelModel):
    land_id: int = Field(alias="landId")
    base_price: int = Field(alias="basePrice")
    min_price: int = Field(alias="minPrice")
    max_price: int = Field(alias="maxPrice")
    value: int
    percent: float
    direction: Literal["below", "above", "equal"]
    tone: Literal["warn", "alert", "neutral"]
    message: str


class FarmerCaseView(_CamelModel):
    case: FarmerCase
    progress_percent: float = Field(alias="progressPercent")
    days_left: int = Field(alias="daysLeft")
    share: SharePayload


class DonationReceipt(_CamelModel):
    farmer_id: int = Field(alias="farmerId")
    amount: float
    message: str


class NewsArticle(_CamelModel):
    title: str
    description: str = ""
    url: str
    image: Optional[str] = None
    published_at: str = Field(default="", alias="publishedAt")
    source_name: str = Field(default="", alias="sourceName")
    published_label: str = Field(default="", alias="publishedLabel")


class SpeechPreparation(BaseModel):
    text: str
    voice_id: Optional[str] = None
    rate: float
    pitch: float
    volume: float
