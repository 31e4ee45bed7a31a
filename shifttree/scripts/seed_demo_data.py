"""
Seed Demo Data Script
This script populates a development database with demo accounts, one schedule
shared with a manager and two members, and a week of shifts.
Run with: python -m shifttree.scripts.seed_demo_data
"""

from datetime import datetime, timedelta
from supabase import Client
from typing import Any, Dict, List, Optional
import logging

from shifttree.core.timestamps import to_db_timestamp
from shifttree.database.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"email": "owner@example.com", "username": "Olivia Owner"},
    {"email": "manager@example.com", "username": "Manny Manager"},
    {"email": "member1@example.com", "username": "Mia Member"},
    {"email": "member2@example.com", "username": "Max Member"},
]

DEMO_SCHEDULE = {
    "name": "Front desk",
    "description": "Front desk coverage for the week",
    "members": {
        "manager@example.com": "manager",
        "member1@example.com": "member",
        "member2@example.com": "member",
    },
    "shift_days": 7,
    "shift_start_hour": 9,
    "shift_hours": 8,
}


def seed_users(supabase: Client, users: List[Dict[str, str]] = DEMO_USERS) -> Dict[str, str]:
    """Create missing accounts; returns email -> user id"""
    logger.info("Seeding users...")
    ids = {}
    created_count = 0

    for user in users:
        existing = supabase.table("user_account")\
            .select("id")\
            .eq("email", user["email"])\
            .execute()

        if existing.data:
            ids[user["email"]] = existing.data[0]["id"]
            logger.debug(f"User exists: {user['email']}")
        else:
            result = supabase.table("user_account").insert({
                "email": user["email"],
                "username": user["username"]
            }).execute()
            ids[user["email"]] = result.data[0]["id"]
            created_count += 1
            logger.debug(f"Created user: {user['email']}")

    logger.info(f"Users seeded: {created_count} created, {len(users) - created_count} existing")
    return ids


def seed_schedule(
    supabase: Client,
    owner_id: str,
    user_ids: Dict[str, str],
    schedule: Dict[str, Any] = DEMO_SCHEDULE,
    start: Optional[datetime] = None
) -> str:
    """Create the demo schedule with its memberships and shifts; returns the schedule id"""
    logger.info("Seeding schedule...")

    result = supabase.table("schedule").insert({
        "owner_id": owner_id,
        "schedule_name": schedule["name"],
        "schedule_description": schedule["description"]
    }).execute()
    schedule_id = result.data[0]["id"]

    for email, role in schedule["members"].items():
        supabase.table("user_schedule_membership").insert({
            "user_id": user_ids[email],
            "schedule_id": schedule_id,
            "user_role": role
        }).execute()

    if start is None:
        start = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)
    shifts = []
    for day in range(schedule["shift_days"]):
        shift_start = start + timedelta(days=day, hours=schedule["shift_start_hour"])
        shifts.append({
            "schedule_id": schedule_id,
            "start_time": to_db_timestamp(shift_start),
            "end_time": to_db_timestamp(shift_start + timedelta(hours=schedule["shift_hours"]))
        })
    supabase.table("shift").insert(shifts).execute()

    logger.info(f"Schedule seeded: {schedule_id} with {len(schedule['members'])} members and {len(shifts)} shifts")
    return schedule_id


def seed_all(supabase: Client) -> str:
    user_ids = seed_users(supabase)
    owner_id = user_ids[DEMO_USERS[0]["email"]]
    return seed_schedule(supabase, owner_id, user_ids)


def main():
    logging.basicConfig(level=logging.INFO)
    supabase = SupabaseClient.get_service_client()
    try:
        schedule_id = seed_all(supabase)
    except Exception as e:
        logger.error(f"Seeding failed: {e}")
        raise
    logger.info(f"Demo data ready (schedule {schedule_id})")


if __name__ == "__main__":
    main()
