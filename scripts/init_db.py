#!/usr/bin/env python3
"""
Initialize the OFFLEASH database.

Creates the PostgreSQL schema and, with --seed, a demo organization:
an admin, a walker with weekday working hours, a customer with a saved
address and two services. Safe to re-run; existing demo rows are kept.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --seed --password demo-pass-123
"""

import argparse
import logging
import sys
from datetime import time
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("offleash.init_db")

DEMO_SLUG = "demo"
DEMO_TIMEZONE = "America/Denver"


def init_postgresql() -> bool:
    """Create tables and report what exists"""
    logger.info("Initializing PostgreSQL...")
    try:
        from domain.models.database import engine, init_database

        init_database()
        tables = inspect(engine).get_table_names()
        logger.info(f"{len(tables)} tables ready: {', '.join(sorted(tables))}")
        return True
    except Exception as e:
        logger.exception(f"Failed to initialize PostgreSQL: {e}")
        return False


def _seed(db, password: str) -> bool:
    from app.security import hash_password
    from domain.enums import MembershipRole
    from domain.models import Location, Organization, Service, WorkingHours
    from repositories import OrganizationRepository
    from services.auth_service import AuthService

    if OrganizationRepository(db).slug_exists(DEMO_SLUG):
        logger.info(f"Organization '{DEMO_SLUG}' already exists, skipping seed")
        return False

    org = Organization(name="Demo Dog Walkers", slug=DEMO_SLUG, settings={}, is_active=True)
    db.add(org)
    db.flush()

    password_hash = hash_password(password)
    members = {}
    for role, first, last in (
        (MembershipRole.ADMIN, "Emma", "Johnson"),
        (MembershipRole.WALKER, "Michael", "Chen"),
        (MembershipRole.CUSTOMER, "Sarah", "Martinez"),
    ):
        user, _ = AuthService.create_member(
            db,
            org,
            email=f"{role.value}@{DEMO_SLUG}.test",
            first_name=first,
            last_name=last,
            role=role,
            password_hash=password_hash,
        )
        user.timezone = DEMO_TIMEZONE
        members[role] = user

    walker = members[MembershipRole.WALKER]
    # Monday to Friday, 0 = Sunday
    for day in range(1, 6):
        db.add(
            WorkingHours(
                organization_id=org.id,
                walker_id=walker.id,
                day_of_week=day,
                start_time=time(8, 0),
                end_time=time(18, 0),
                is_active=True,
            )
        )

    db.add_all(
        [
            Service(
                organization_id=org.id,
                name="30 Minute Walk",
                description="A brisk neighbourhood walk",
                duration_minutes=30,
                base_price_cents=2500,
            ),
            Service(
                organization_id=org.id,
                name="60 Minute Adventure",
                description="Park visit with off-leash play",
                duration_minutes=60,
                base_price_cents=4000,
            ),
            Location(
                organization_id=org.id,
                user_id=members[MembershipRole.CUSTOMER].id,
                name="Home",
                address="1600 Glenarm Pl",
                city="Denver",
                state="CO",
                zip_code="80202",
                latitude=39.7447,
                longitude=-104.9914,
                is_default=True,
            ),
        ]
    )
    return True


def seed_demo(password: str) -> bool:
    """Demo tenant for local development; skipped when the slug already exists"""
    from domain.models.database import session_scope

    try:
        with session_scope() as db:
            created = _seed(db, password)
    except Exception as e:
        logger.exception(f"Failed to seed demo data: {e}")
        return False

    if created:
        for role in ("admin", "walker", "customer"):
            logger.info(f"Demo {role}: {role}@{DEMO_SLUG}.test")
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Initialize the OFFLEASH database")
    parser.add_argument("--seed", action="store_true", help="create the demo organization")
    parser.add_argument(
        "--password",
        default="offleash-demo",
        help="password for the demo accounts (min 8 characters)",
    )
    args = parser.parse_args(argv)

    if not init_postgresql():
        return 1
    if args.seed and not seed_demo(args.password):
        return 1
    logger.info("Database ready")
    return 0


if __name__ == "__main__":
    sys.exit(main())
