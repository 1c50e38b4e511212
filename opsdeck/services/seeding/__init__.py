from __future__ import annotations

# Re-export seeding services for centralized imports.

from opsdeck.services.seeding.fixtures import SeedFixtures, build_fixtures
from opsdeck.services.seeding.loader import SeedContext, SeedReport, build_seed_plan, run_seed
from opsdeck.services.seeding.plan import SeedPlan, SeedStep
from opsdeck.services.seeding.upsert import hash_password, upsert, verify_password

__all__ = [
    "SeedFixtures",
    "build_fixtures",
    "SeedContext",
    "SeedReport",
    "build_seed_plan",
    "run_seed",
    "SeedPlan",
    "SeedStep",
    "hash_password",
    "upsert",
    "verify_password",
]
