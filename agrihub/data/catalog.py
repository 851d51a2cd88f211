"""Sample marketplace and farmer-support records served by the listing pages."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from ..schemas import EquipmentListing, FarmerCase, LandListing


EQUIPMENT_TYPES = [
    "All Types",
    "Tractor",
    "Harvester",
    "Tillage Equipment",
    "Spraying Equipment",
    "Seeding Equipment",
]

EQUIPMENT_LOCATIONS = [
    "All Locations",
    "Andhra Pradesh",
    "Telangana",
    "Karnataka",
    "Tamil Nadu",
]

LAND_STATES = [
    "Andhra Pradesh",
    "Telangana",
    "Karnataka",
    "Tamil Nadu",
    "Kerala",
    "Maharashtra",
]

_EQUIPMENT = [
    {
        "id": 1,
        "name": "John Deere 5045D Tractor",
        "type": "Tractor",
        "location": "Guntur, Andhra Pradesh",
        "specs": {"power": "45 HP", "condition": "Excellent", "year": 2022},
        "price_per_day": 2500,
        "features": ["Power Steering", "4WD", "Diesel Engine", "PTO"],
        "availability": "Immediately",
        "owner_name": "Ramesh Kumar",
        "phone": "+91 9876543210",
        "email": "ramesh.k@email.com",
        "min_days": 1,
        "max_days": 30,
    },
    {
        "id": 2,
        "name": "Mahindra 575 DI Tractor",
        "type": "Tractor",
        "location": "Warangal, Telangana",
        "specs": {"power": "47 HP", "condition": "Good", "year": 2021},
        "price_per_day": 2200,
        "features": ["Power Steering", "2WD", "Diesel Engine", "Dual Clutch"],
        "availability": "From next week",
        "owner_name": "Suresh Reddy",
        "phone": "+91 9876543211",
        "email": "suresh.r@email.com",
        "min_days": 2,
        "max_days": 45,
    },
    {
        "id": 3,
        "name": "Kubota DC-70 Combine Harvester",
        "type": "Harvester",
        "location": "Krishna District, Andhra Pradesh",
        "specs": {"power": "70 HP", "condition": "Excellent", "year": 2023},
        "price_per_day": 5000,
        "features": ["Track Type", "Grain Tank", "Auto Steering", "GPS"],
        "availability": "Next month",
        "owner_name": "Venkat Rao",
        "phone": "+91 9876543212",
        "email": "venkat.r@email.com",
        "min_days": 3,
        "max_days": 15,
    },
    {
        "id": 4,
        "name": "Rotavator Set",
        "type": "Tillage Equipment",
        "location": "Rangareddy, Telangana",
        "specs": {"width": "7 feet", "condition": "Good", "year": 2023},
        "price_per_day": 1200,
        "features": [
            "Heavy Duty Blades",
            "Adjustable Depth",
            "Compatible with all tractors",
            "With Cage Wheels",
        ],
        "availability": "Immediately",
        "owner_name": "Krishna Murthy",
        "phone": "+91 9876543213",
        "email": "krishna.m@email.com",
        "min_days": 1,
        "max_days": 20,
    },
    {
        "id": 5,
        "name": "Crop Sprayer Equipment",
        "type": "Spraying Equipment",
        "location": "East Godavari, Andhra Pradesh",
        "specs": {"capacity": "500L", "condition": "Excellent", "year": 2023},
        "price_per_day": 1500,
        "features": [
            "High Pressure Pump",
            "Wide Coverage",
            "Multiple Nozzles",
            "Digital Control",
        ],
        "availability": "From next week",
        "owner_name": "Prasad Reddy",
        "phone": "+91 9876543214",
        "email": "prasad.r@email.com",
        "min_days": 1,
        "max_days": 10,
    },
]

_LANDS = [
    {
        "id": 1,
        "title": "Fertile Paddy Field",
        "location": "Guntur, Andhra Pradesh",
        "area": 5.5,
        "price_per_acre": 45000,
        "soil_type": "Black Soil",
        "lease_duration": 3,
        "features": ["Irrigation Well", "Power Supply", "Road Access", "Storage Facility"],
        "owner_name": "Ramesh Kumar",
        "phone": "+91 9876543210",
        "email": "ramesh.k@email.com",
    },
    {
        "id": 2,
        "title": "Organic Farm Land",
        "location": "Warangal, Telangana",
        "area": 3.8,
        "price_per_acre": 38000,
        "soil_type": "Red Soil",
        "lease_duration": 5,
        "features": ["Borewell", "Fencing", "Farm House", "Natural Springs"],
        "owner_name": "Suresh Reddy",
        "phone": "+91 9876543211",
        "email": "suresh.r@email.com",
    },
    {
        "id": 3,
        "title": "Multi-Crop Agricultural Land",
        "location": "Krishna District, Andhra Pradesh",
        "area": 7.2,
        "price_per_acre": 52000,
        "soil_type": "Alluvial Soil",
        "lease_duration": 4,
        "features": [
            "Canal Irrigation",
            "Equipment Shed",
            "Labor Quarters",
            "Market Proximity",
        ],
        "owner_name": "Venkat Rao",
        "phone": "+91 9876543212",
        "email": "venkat.r@email.com",
    },
    {
        "id": 4,
        "title": "Vegetable Farm Plot",
        "location": "Rangareddy, Telangana",
        "area": 2.5,
        "price_per_acre": 42000,
        "soil_type": "Loamy Soil",
        "lease_duration": 2,
        "features": ["Drip Irrigation", "Greenhouse", "Solar Power", "Security"],
        "owner_name": "Krishna Murthy",
        "phone": "+91 9876543213",
        "email": "krishna.m@email.com",
    },
    {
        "id": 5,
        "title": "Commercial Farming Land",
        "location": "East Godavari, Andhra Pradesh",
        "area": 10.0,
        "price_per_acre": 58000,
        "soil_type": "Black Soil",
        "lease_duration": 5,
        "features": [
            "Multiple Borewells",
            "Large Storage",
            "Processing Unit",
            "Transport Facility",
        ],
        "owner_name": "Prasad Reddy",
        "phone": "+91 9876543214",
        "email": "prasad.r@email.com",
    },
    {
        "id": 6,
        "title": "Fruit Orchard Land",
        "location": "Medak, Telangana",
        "area": 4.5,
        "price_per_acre": 48000,
        "soil_type": "Red Soil",
        "lease_duration": 6,
        "features": ["Existing Fruit Trees", "Water Tank", "Watchman Room", "Tool Storage"],
        "owner_name": "Lakshmi Devi",
        "phone": "+91 9876543215",
        "email": "lakshmi.d@email.com",
    },
]

_FARMER_CASES = [
    {
        "id": 1,
        "name": "Rajesh Patel",
        "age": 45,
        "location": "Vidarbha, Maharashtra",
        "family_size": 5,
        "land_size": 3.5,
        "amount_needed": 250000,
        "amount_raised": 175000,
        "story": (
            "After three consecutive failed crops due to irregular rainfall and "
            "mounting debt from private lenders, Rajesh is struggling to fund his "
            "children's education and purchase seeds for the next season."
        ),
        "deadline": date(2024, 5, 15),
        "supporters": 28,
        "verified_by": "Local Farmers Association",
    },
    {
        "id": 2,
        "name": "Lakshmi Devi",
        "age": 52,
        "location": "Anantapur, Andhra Pradesh",
        "family_size": 4,
        "land_size": 2.8,
        "amount_needed": 180000,
        "amount_raised": 92000,
        "story": (
            "A widow managing her farm alone, Lakshmi faces challenges with well "
            "irrigation repairs and loan repayments. Her determination to continue "
            "farming inspires the local community."
        ),
        "deadline": date(2024, 4, 30),
        "supporters": 15,
        "verified_by": "District Agriculture Office",
    },
    {
        "id": 3,
        "name": "Surinder Singh",
        "age": 48,
        "location": "Bathinda, Punjab",
        "family_size": 6,
        "land_size": 4.2,
        "amount_needed": 300000,
        "amount_raised": 210000,
        "story": (
            "Despite being an experienced farmer, unexpected medical emergencies and "
            "crop disease have created significant financial strain. Surinder needs "
            "support to recover and maintain his farm operations."
        ),
        "deadline": date(2024, 6, 10),
        "supporters": 32,
        "verified_by": "Punjab Kisan Union",
    },
]

EQUIPMENT_LIST: List[EquipmentListing] = [
    EquipmentListing.model_validate(item) for item in _EQUIPMENT
]
LAND_LISTINGS: List[LandListing] = [LandListing.model_validate(item) for item in _LANDS]
FARMER_CASES: List[FarmerCase] = [
    FarmerCase.model_validate(item) for item in _FARMER_CASES
]


def get_equipment(equipment_id: int) -> Optional[EquipmentListing]:
    return next((item for item in EQUIPMENT_LIST if item.id == equipment_id), None)


def get_land(land_id: int) -> Optional[LandListing]:
    return next((item for item in LAND_LISTINGS if item.id == land_id), None)


def get_farmer_case(case_id: int) -> Optional[FarmerCase]:
    return next((item for item in FARMER_CASES if item.id == case_id), None)
