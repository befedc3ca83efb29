"""Households, their category catalog, and the vehicles/pets that attachments reference."""

import json
import sqlite3
from dataclasses import dataclass, field

from faker import Faker
from tqdm import tqdm

from household_seed.prng import Mulberry32, random_choice, random_int, uuid_like
from household_seed.store import Column, make_inserter, transaction
from household_seed.timestamps import DAY_MS, HOUR_MS, utc_ms

HOUSEHOLD_TIMEZONES = [
    "UTC",
    "America/New_York",
    "America/Los_Angeles",
    "Europe/Dublin",
    "Europe/Berlin",
    "Asia/Tokyo",
    "Australia/Sydney",
]

# (slug, name, colour), replicated for every household, position = index
CATEGORY_DEFINITIONS: list[tuple[str, str, str]] = [
    ("primary", "Primary", "#4F46E5"),
    ("secondary", "Secondary", "#1D4ED8"),
    ("tasks", "Tasks", "#0EA5E9"),
    ("bills", "Bills", "#F59E0B"),
    ("insurance", "Insurance", "#EA580C"),
    ("property", "Property", "#F97316"),
    ("vehicles", "Vehicles", "#22C55E"),
    ("pets", "Pets", "#16A34A"),
    ("family", "Family", "#EF4444"),
    ("inventory", "Inventory", "#C026D3"),
    ("budget", "Budget", "#A855F7"),
    ("shopping", "Shopping", "#6366F1"),
]

VEHICLES_PER_HOUSEHOLD = 8
PETS_PER_HOUSEHOLD = 10

VEHICLE_COLUMNS: list[str | Column] = [
    "id", "household_id", "name", "position", "make", "model", "trim", "model_year",
    "colour_primary", "colour_secondary", "body_type", "doors", "seats", "transmission",
    "drivetrain", "fuel_type_primary", "fuel_type_secondary", "engine_cc", "engine_kw",
    "emissions_co2_gkm", "euro_emissions_standard",
    Column("mot_date", ("mot_date", "next_mot_due")),
    Column("service_date", ("service_date", "next_service_due")),
    "mot_reminder", "service_reminder", "mot_last_date", "mot_expiry_date", "ved_expiry_date",
    "insurance_provider", "insurance_policy_number", "insurance_start_date",
    "insurance_end_date", "breakdown_provider", "breakdown_expiry_date", "ownership_status",
    "purchase_date", "purchase_price", "seller_name", "seller_notes", "odometer_at_purchase",
    "finance_lender", "finance_agreement_number", "finance_monthly_payment",
    "lease_start_date", "lease_end_date", "contract_mileage_limit", "sold_date", "sold_price",
    "odometer_unit", "odometer_current", "odometer_updated_at", "service_interval_miles",
    "service_interval_months", "last_service_date", "next_service_due_date",
    "next_service_due_miles", "cambelt_due_date", "cambelt_due_miles", "brake_fluid_due_date",
    "coolant_due_date", "tyre_size_front", "tyre_size_rear", "tyre_pressure_front_psi",
    "tyre_pressure_rear_psi", "oil_grade", "next_mot_due", "next_service_due", "next_ved_due",
    "next_insurance_due", "primary_driver_id", "additional_driver_ids", "key_count",
    "has_spare_key", "hero_image_path", "default_attachment_root_key",
    "default_attachment_folder_relpath", "status", "tags", "notes", "reg", "vin",
    "created_at", "updated_at", "deleted_at",
]


@dataclass(frozen=True)
class Household:
    id: str
    name: str
    tz: str


@dataclass(frozen=True)
class SeedCategory:
    id: str
    slug: str
    position: int


@dataclass
class SupportingRecords:
    """Vehicle and pet ids per household, for attachment rows to point at."""

    vehicles: dict[str, list[str]] = field(default_factory=dict)
    pets: dict[str, list[str]] = field(default_factory=dict)


# ============================================================
# Generator: households
# ============================================================


def generate_households(
    conn: sqlite3.Connection, rng: Mulberry32, count: int, fake: Faker
) -> list[Household]:
    """Insert ``count`` households ``hh_01..`` with rotating timezones."""
    insert_household = make_inserter(
        conn,
        "household",
        ["id", "name", "created_at", "updated_at", "deleted_at", Column("tz", ("tz",))],
    )
    base = utc_ms(2023, 1, 1)
    households: list[Household] = []

    with transaction(conn):
        for i in range(count):
            household_id = f"hh_{i + 1:02d}"
            created = base + i * DAY_MS
            tz = random_choice(rng, HOUSEHOLD_TIMEZONES)
            name = f"{fake.last_name()} Household {i + 1}"
            insert_household({
                "id": household_id,
                "name": name,
                "created_at": created,
                "updated_at": created + HOUR_MS,
                "deleted_at": None,
                "tz": tz,
            })
            households.append(Household(household_id, name, tz))

    return households


# ============================================================
# Generator: categories (fixed catalog per household)
# ============================================================


def generate_categories(
    conn: sqlite3.Connection, households: list[Household]
) -> dict[str, list[SeedCategory]]:
    """Insert the twelve-entry catalog for each household. Uses no randomness."""
    insert_category = make_inserter(
        conn,
        "categories",
        ["id", "household_id", "name", "slug", "color", "position", "z", "is_visible",
         "created_at", "updated_at", "deleted_at"],
    )
    base = utc_ms(2023, 1, 1)
    by_household: dict[str, list[SeedCategory]] = {}

    with transaction(conn):
        for household in households:
            entries: list[SeedCategory] = []
            for index, (slug, name, color) in enumerate(CATEGORY_DEFINITIONS):
                category_id = f"cat_{household.id}_{slug}"
                created = base + index * HOUR_MS
                insert_category({
                    "id": category_id,
                    "household_id": household.id,
                    "name": name,
                    "slug": slug,
                    "color": color,
                    "position": index,
                    "z": 0,
                    "is_visible": 1,
                    "created_at": created,
                    "updated_at": created,
                    "deleted_at": None,
                })
                entries.append(SeedCategory(category_id, slug, index))
            by_household[household.id] = entries

    return by_household


# ============================================================
# Generator: vehicles and pets
# ============================================================


def _vehicle_row(
    rng: Mulberry32, fake: Faker, household: Household, hh_index: int, i: int
) -> dict:
    """One fully-populated vehicle. Draw order is fixed; do not reorder fields."""
    vehicle_id = f"veh_{household.id}_{i + 1:02d}"
    include_reg = i % 3 != 0
    include_vin = i % 4 != 0
    mot_date = utc_ms(2023, 1, 1) + random_int(rng, 0, 365) * DAY_MS
    service_date = utc_ms(2023, 1, 1) + random_int(rng, 0, 365) * DAY_MS
    purchase_date = utc_ms(2022, 1, 1) + random_int(rng, 0, 365) * DAY_MS
    lease_start = utc_ms(2023, 1, 1) + random_int(rng, 0, 180) * DAY_MS
    if i % 4 == 0:
        ownership = "leased"
    elif i % 5 == 0:
        ownership = "fleet"
    else:
        ownership = "owned"
    if i % 6 == 0:
        status = "archived"
    elif i % 7 == 0:
        status = "sold"
    else:
        status = "active"
    odometer = 10_000 + random_int(rng, 0, 25_000)
    vin_base = uuid_like(rng).replace("-", "").upper()
    sold_date = utc_ms(2024, 6, 1) + i * DAY_MS if status == "sold" else None
    sold_price = 12_500_00 + random_int(rng, 0, 5_000_00) if sold_date else None

    return {
        "id": vehicle_id,
        "household_id": household.id,
        "name": f"{household.name} Vehicle {i + 1}",
        "position": i,
        "make": random_choice(rng, ["Ford", "Honda", "Toyota", "BMW", "Audi", "Tesla"]),
        "model": random_choice(rng, ["S", "LX", "GT", "Touring", "CX", "Pro"]),
        "trim": random_choice(rng, ["Base", "Limited", "Sport", "Executive"]),
        "model_year": 2015 + random_int(rng, 0, 9),
        "colour_primary": random_choice(rng, ["Blue", "Red", "White", "Grey", "Black"]),
        "colour_secondary": (
            random_choice(rng, ["Black", "Silver", "White", None]) if rng.next() < 0.5 else None
        ),
        "body_type": random_choice(rng, ["Hatchback", "SUV", "Saloon", "Estate"]),
        "doors": random_choice(rng, [3, 4, 5]),
        "seats": random_choice(rng, [4, 5, 7]),
        "transmission": random_choice(rng, ["manual", "automatic"]),
        "drivetrain": random_choice(rng, ["FWD", "RWD", "AWD"]),
        "fuel_type_primary": random_choice(rng, ["petrol", "diesel", "electric", "hybrid"]),
        "fuel_type_secondary": "electric" if rng.next() < 0.2 else None,
        "engine_cc": random_int(rng, 1000, 3000),
        "engine_kw": random_int(rng, 70, 300),
        "emissions_co2_gkm": random_int(rng, 80, 220),
        "euro_emissions_standard": random_choice(rng, ["EURO 5", "EURO 6"]),
        "mot_date": mot_date,
        "service_date": service_date,
        "mot_reminder": mot_date - random_int(rng, 7, 21) * DAY_MS if rng.next() < 0.3 else None,
        "service_reminder": (
            service_date - random_int(rng, 7, 30) * DAY_MS if rng.next() < 0.3 else None
        ),
        "mot_last_date": mot_date - 365 * DAY_MS,
        "mot_expiry_date": mot_date + 365 * DAY_MS,
        "ved_expiry_date": utc_ms(2024, 1, 1) + random_int(rng, 30, 365) * DAY_MS,
        "insurance_provider": random_choice(rng, ["Direct Line", "Aviva", "LV="]),
        "insurance_policy_number": f"POL-{hh_index + 1}-{i + 1}",
        "insurance_start_date": utc_ms(2023, 7, 1),
        "insurance_end_date": utc_ms(2024, 6, 30),
        "breakdown_provider": random_choice(rng, ["AA", "RAC", "Green Flag"]),
        "breakdown_expiry_date": utc_ms(2024, 4, 1) + random_int(rng, 0, 120) * DAY_MS,
        "ownership_status": ownership,
        "purchase_date": purchase_date,
        "purchase_price": 12_000_00 + random_int(rng, 0, 8_000_00),
        "seller_name": random_choice(rng, ["Autohaus", "Main Street Motors", "Trusted Dealer"]),
        "seller_notes": fake.sentence(nb_words=6),
        "odometer_at_purchase": 5_000 + random_int(rng, 0, 5_000),
        "finance_lender": "NatWest" if ownership == "owned" else "LeasePlan",
        "finance_agreement_number": (
            f"FIN-{vehicle_id}" if ownership == "owned" else f"LEASE-{vehicle_id}"
        ),
        "finance_monthly_payment": 450_00 if ownership == "leased" else 0,
        "lease_start_date": lease_start if ownership == "leased" else None,
        "lease_end_date": lease_start + 365 * DAY_MS if ownership == "leased" else None,
        "contract_mileage_limit": 18_000 if ownership == "leased" else None,
        "sold_date": sold_date,
        "sold_price": sold_price,
        "odometer_unit": "km" if i % 5 == 0 else "mi",
        "odometer_current": odometer,
        "odometer_updated_at": utc_ms(2024, 5, 1),
        "service_interval_miles": 10_000,
        "service_interval_months": 12,
        "last_service_date": service_date - 180 * DAY_MS,
        "next_service_due_date": service_date + 365 * DAY_MS,
        "next_service_due_miles": odometer + 10_000,
        "cambelt_due_date": utc_ms(2025, 1, 1) + random_int(rng, 0, 365) * DAY_MS,
        "cambelt_due_miles": odometer + 40_000,
        "brake_fluid_due_date": utc_ms(2024, 9, 1),
        "coolant_due_date": utc_ms(2024, 11, 1),
        "tyre_size_front": "225/45 R17",
        "tyre_size_rear": "225/45 R17",
        "tyre_pressure_front_psi": 36,
        "tyre_pressure_rear_psi": 34,
        "oil_grade": random_choice(rng, ["5W-30", "0W-20"]),
        "next_mot_due": mot_date + 365 * DAY_MS,
        "next_service_due": service_date + 365 * DAY_MS,
        "next_ved_due": utc_ms(2024, 7, 1) + random_int(rng, 0, 60) * DAY_MS,
        "next_insurance_due": utc_ms(2024, 6, 30),
        "primary_driver_id": f"driver_{household.id}",
        "additional_driver_ids": json.dumps(
            [f"driver_{household.id}_2", f"driver_{household.id}_3"]
        ),
        "key_count": 2,
        "has_spare_key": i % 2 == 0,
        "hero_image_path": f"images/{vehicle_id}.jpg",
        "default_attachment_root_key": "attachments",
        "default_attachment_folder_relpath": f"vehicles/{vehicle_id}",
        "status": status,
        "tags": json.dumps(["fleet", "daily" if i % 2 == 0 else "spare"]),
        "notes": "Large fixture data row for Vehicles module.",
        "reg": f"REG-{hh_index + 1}-{i + 1}" if include_reg else None,
        "vin": vin_base[:17].ljust(17, "X") if include_vin else None,
        "created_at": utc_ms(2023, 1, 1),
        "updated_at": utc_ms(2024, 1, 1),
        "deleted_at": utc_ms(2024, 7, 1) if rng.next() < 0.05 else None,
    }


def generate_supporting_records(
    conn: sqlite3.Connection,
    households: list[Household],
    rng: Mulberry32,
    fake: Faker,
    *,
    progress: bool = False,
) -> SupportingRecords:
    """Insert 8 vehicles and 10 pets per household."""
    insert_vehicle = make_inserter(conn, "vehicles", VEHICLE_COLUMNS)
    insert_pet = make_inserter(
        conn,
        "pets",
        ["id", "name", "type", "household_id", "position", "created_at", "updated_at", "deleted_at"],
    )
    records = SupportingRecords()

    with transaction(conn):
        for hh_index, household in enumerate(
            tqdm(households, desc="  Vehicles/pets", leave=False, disable=not progress)
        ):
            vehicle_ids: list[str] = []
            for i in range(VEHICLES_PER_HOUSEHOLD):
                row = _vehicle_row(rng, fake, household, hh_index, i)
                insert_vehicle(row)
                vehicle_ids.append(row["id"])

            pet_ids: list[str] = []
            for i in range(PETS_PER_HOUSEHOLD):
                pet_id = f"pet_{household.id}_{i + 1:02d}"
                insert_pet({
                    "id": pet_id,
                    "name": random_choice(
                        rng, ["Milo", "Bella", "Charlie", "Luna", "Oliver", "Nala", "Max", "Coco"]
                    ),
                    "type": random_choice(rng, ["Dog", "Cat", "Bird", "Hamster", "Rabbit"]),
                    "household_id": household.id,
                    "position": i,
                    "created_at": utc_ms(2023, 6, 1),
                    "updated_at": utc_ms(2024, 1, 1),
                    "deleted_at": utc_ms(2024, 8, 1) if rng.next() < 0.04 else None,
                })
                pet_ids.append(pet_id)

            records.vehicles[household.id] = vehicle_ids
            records.pets[household.id] = pet_ids

    return records
