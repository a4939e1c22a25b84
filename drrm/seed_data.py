"""
Reference rows inserted into empty tables on startup.
"""

from __future__ import annotations

from drrm.schemas import (
    InsertEvacuationCenter,
    InsertGoBagItem,
    InsertHazardZone,
    InsertHousehold,
    InsertPoi,
)

GO_BAG_ITEMS = [
    InsertGoBagItem(category="Essentials", name="Water (1 gallon/person)"),
    InsertGoBagItem(category="Essentials", name="Non-perishable Food"),
    InsertGoBagItem(category="Essentials", name="Flashlight & Batteries"),
    InsertGoBagItem(category="First Aid", name="Bandages & Antiseptic"),
    InsertGoBagItem(category="First Aid", name="Prescription Meds"),
    InsertGoBagItem(category="Documents", name="ID & Important Papers"),
    InsertGoBagItem(category="Documents", name="Cash & Coins"),
    InsertGoBagItem(category="Clothing", name="Rain Jacket / Poncho"),
    InsertGoBagItem(category="Clothing", name="Extra Clothes"),
]

EVACUATION_CENTERS = [
    InsertEvacuationCenter(
        name="Pio Duran Central School",
        distance="0.5 km",
        capacity="500 pax",
        status="Open",
        latitude="13.0345",
        longitude="123.4567",
    ),
    InsertEvacuationCenter(
        name="Municipal Gymnasium",
        distance="1.2 km",
        capacity="1000 pax",
        status="Open",
        latitude="13.0355",
        longitude="123.4577",
    ),
    InsertEvacuationCenter(
        name="Barangay Hall Shelter",
        distance="2.5 km",
        capacity="200 pax",
        status="Full",
        latitude="13.0365",
        longitude="123.4587",
    ),
]

HOUSEHOLDS = [
    InsertHousehold(
        name="Sample Household", address="123 Main Street, Pio Duran, Albay"
    ),
]

# Attached to the first household at seeding time.
MEMBERS = [
    {"name": "You", "contact": "+63 912 345 6789"},
    {"name": "Maria Santos", "contact": "+63 912 345 6780"},
    {"name": "Juan Dela Cruz", "contact": "+63 912 345 6781"},
    {"name": "Rosa Cruz", "contact": "+63 912 345 6782"},
]

HAZARD_ZONES = [
    InsertHazardZone(
        name="Bicol River Flood Zone",
        type="flood",
        coordinates=["13.0300,123.4500", "13.0320,123.4520", "13.0310,123.4540"],
        severity="high",
    ),
    InsertHazardZone(
        name="Mt. Mayon Landslide Area",
        type="landslide",
        coordinates=["13.0400,123.4600", "13.0420,123.4620", "13.0410,123.4640"],
        severity="medium",
    ),
]

POIS = [
    InsertPoi(
        name="Pio Duran Health Center",
        type="medical",
        latitude="13.0350",
        longitude="123.4570",
        address="Main Street, Pio Duran",
    ),
    InsertPoi(
        name="Municipal Charging Station",
        type="charging",
        latitude="13.0360",
        longitude="123.4580",
        address="Town Plaza",
    ),
    InsertPoi(
        name="Barangay Pet Shelter",
        type="pet-shelter",
        latitude="13.0370",
        longitude="123.4590",
        address="Barangay Hall Compound",
    ),
]
