from .models import (
    AnalysisOutcome,
    DonationReceipt,
    DonationRequest,
    EquipmentListing,
    FarmerCase,
    FarmerCaseView,
    FarmerProfile,
    FarmerResponse,
    ForumMessage,
    ForumQuestion,
    ForumReply,
    ForumThread,
    GenerationConfig,
    ImageUpload,
    LandListing,
    MarketFactor,
    MonthlyPrediction,
    NegotiationResult,
    NewsArticle,
    PestProduct,
    PestReport,
    PestTreatment,
    PriceOptions,
    PricePrediction,
    PricePredictionInput,
    PriceRecommendation,
    ProposalRequest,
    RentalQuote,
    RentalQuoteRequest,
    ResultSection,
    SharePayload,
    SoilNutrient,
    SoilReport,
    SoilTestInput,
    SpeechPreparation,
    SpeechPrepareRequest,
    SpeechVoice,
)

__all__ = [
    "AnalysisOutcome",
    "DonationReceipt",
    "DonationRequest",
    "EquipmentListing",
    "FarmerCase",
    "FarmerCaseView",
    "FarmerProfile",
    "FarmerResponse",
    "ForumMessage",
    "ForumQuestion",
    "ForumReply",
    "ForumThread",
    "GenerationConfig",
    "ImageUpload",
    "LandListing",
    "MarketFactor",
    "MonthlyPrediction",
    "NegotiationResult",
    "NewsArticle",
    "PestProduct",
    "PestReport",
    "PestTreatment",
    "PriceOptions",
    "PricePrediction",
    "PricePredictionInput",
    "PriceRecommendation",
    "ProposalRequest",
    "RentalQuote",
    "RentalQuoteRequest",
    "ResultSection",
    "SharePayload",
    "SoilNutrient",
    "SoilReport",
    "SoilTestInput",
    "SpeechPreparation",
    "SpeechPrepareRequest",
    "SpeechVoice",
]
