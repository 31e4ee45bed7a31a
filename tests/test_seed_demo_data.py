from datetime import datetime

from shifttree.scripts.seed_demo_data import DEMO_USERS, seed_all, seed_schedule, seed_users


def test_seed_users_is_idempotent(db):
    first = seed_users(db)
    second = seed_users(db)
    assert first == second
    assert len(db.tables["user_account"]) == len(DEMO_USERS)


def test_seed_schedule(db):
    ids = seed_users(db)
    owner_id = ids["owner@example.com"]
    schedule_id = seed_schedule(db, owner_id, ids, start=datetime(2024, 5, 6))

    assert db.role(owner_id, schedule_id) == "owner"
    assert db.role(ids["manager@example.com"], schedule_id) == "manager"
    assert db.role(ids["member1@example.com"], schedule_id) == "member"

    shifts = sorted(db.tables["shift"], key=lambda s: s["start_time"])
    assert len(shifts) == 7
    assert shifts[0]["start_time"] == "2024-05-06T09:00:00"
    assert shifts[0]["end_time"] == "2024-05-06T17:00:00"


def test_seed_all(db):
    schedule_id = seed_all(db)
    assert [s["id"] for s in db.tables["schedule"]] == [schedule_id]
