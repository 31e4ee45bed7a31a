"PyTest config: an in-memory Supabase double and the app wired to it."
import os
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from postgrest.exceptions import APIError

from shifttree.config.settings import settings
from shifttree.database.supabase_client import get_supabase
from shifttree.main import app

API = settings.api_prefix

UNIQUE_KEYS = {
    "user_account": [("email",)],
    "user_schedule_membership": [("user_id", "schedule_id")],
    "user_shift_signup": [("user_id", "shift_id")],
}


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Subset of the postgrest query builder used by the services."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.action = "select"
        self.columns = "*"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.limit_to = None

    def select(self, columns="*"):
        self.action = "select"
        self.columns = columns
        return self

    def insert(self, payload):
        self.action = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.action = "update"
        self.payload = payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.limit_to = count
        return self

    def _matching(self, rows):
        return [row for row in rows if all(f(row) for f in self.filters)]

    def _project(self, row):
        if self.columns.strip() == "*":
            return dict(row)
        return {c.strip(): row.get(c.strip()) for c in self.columns.split(",")}

    def execute(self):
        self.db.calls.append((self.action, self.table))
        if self.action == "insert":
            rows = self.payload if isinstance(self.payload, list) else [self.payload]
            return FakeResponse([dict(self.db.insert(self.table, row)) for row in rows])

        rows = self._matching(self.db.rows(self.table))
        if self.action == "update":
            for row in rows:
                row.update(self.payload)
            return FakeResponse([dict(r) for r in rows])
        if self.action == "delete":
            self.db.remove(self.table, rows)
            return FakeResponse([dict(r) for r in rows])

        if self.order_by:
            column, desc = self.order_by
            rows = sorted(rows, key=lambda r: r[column], reverse=desc)
        if self.limit_to is not None:
            rows = rows[:self.limit_to]
        return FakeResponse([self._project(r) for r in rows])


class FakeRpc:
    def __init__(self, db, name, params):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.calls.append(("rpc", self.name))
        if self.name in self.db.before_rpc:
            self.db.before_rpc[self.name]()
        if self.name in self.db.revoked_rpcs:
            data = [] if self.name in ("create_shift", "update_shift") else False
            return FakeResponse(data)
        return FakeResponse(getattr(self.db, "rpc_" + self.name)(**self.params))


class FakeSupabase:
    """Tables, the schedule_info view and the guarded mutation functions, in memory."""

    def __init__(self):
        self.tables = {
            "user_account": [],
            "schedule": [],
            "user_schedule_membership": [],
            "shift": [],
            "user_shift_signup": [],
        }
        self.calls = []
        self.revoked_rpcs = set()
        # name -> callable run just before the rpc body, to simulate concurrent writes
        self.before_rpc = {}

    # client surface

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        return FakeRpc(self, name, params)

    # storage

    def rows(self, table):
        if table == "schedule_info":
            return self.schedule_info()
        return self.tables[table]

    def insert(self, table, row):
        row = dict(row)
        row.setdefault("id", str(uuid.uuid4()))
        for key in UNIQUE_KEYS.get(table, []):
            if any(all(r.get(k) == row.get(k) for k in key) for r in self.tables[table]):
                raise APIError({"message": "duplicate key value", "code": "23505", "hint": None, "details": None})
        if table == "schedule":
            row.setdefault("schedule_description", None)
            row.setdefault("removed", None)
        if table == "shift":
            row.setdefault("shift_name", None)
            row.setdefault("shift_description", None)
        if table == "user_shift_signup":
            row.setdefault("user_weighting", 1)
        self.tables[table].append(row)
        return row

    def remove(self, table, rows):
        ids = {r["id"] for r in rows}
        self.tables[table] = [r for r in self.tables[table] if r["id"] not in ids]
        if table == "shift":
            self.tables["user_shift_signup"] = [
                s for s in self.tables["user_shift_signup"] if s["shift_id"] not in ids
            ]

    def schedule_info(self):
        info = []
        for s in self.tables["schedule"]:
            if s.get("removed") is not None:
                continue
            shifts = [sh for sh in self.tables["shift"] if sh["schedule_id"] == s["id"]]
            base = {
                "schedule_id": s["id"],
                "schedule_name": s["schedule_name"],
                "schedule_description": s.get("schedule_description"),
                "owner_id": s["owner_id"],
                "start_time": min((sh["start_time"] for sh in shifts), default=None),
                "end_time": max((sh["end_time"] for sh in shifts), default=None),
            }
            info.append({**base, "user_id": s["owner_id"], "user_role": "owner"})
            for m in self.tables["user_schedule_membership"]:
                if m["schedule_id"] == s["id"]:
                    info.append({**base, "user_id": m["user_id"], "user_role": m["user_role"]})
        return info

    def role(self, user_id, schedule_id):
        for row in self.schedule_info():
            if row["user_id"] == user_id and row["schedule_id"] == schedule_id:
                return row["user_role"]
        return None

    def shift(self, shift_id):
        return next((s for s in self.tables["shift"] if s["id"] == shift_id), None)

    # guarded mutation functions

    def rpc_remove_schedule(self, p_user_id, p_schedule_id):
        if self.role(p_user_id, p_schedule_id) not in ("owner", "manager"):
            return False
        for s in self.tables["schedule"]:
            if s["id"] == p_schedule_id:
                s["removed"] = datetime.utcnow().isoformat()
        return True

    def rpc_add_schedule_member(self, p_user_id, p_schedule_id, p_member_id, p_role="member"):
        allowed = ("owner",) if p_role == "manager" else ("owner", "manager")
        if self.role(p_user_id, p_schedule_id) not in allowed:
            return False
        self.insert("user_schedule_membership", {
            "user_id": p_member_id, "schedule_id": p_schedule_id, "user_role": p_role
        })
        return True

    def rpc_remove_schedule_member(self, p_user_id, p_schedule_id, p_member_id):
        allowed = ("owner",) if self.role(p_member_id, p_schedule_id) == "manager" else ("owner", "manager")
        if self.role(p_user_id, p_schedule_id) not in allowed:
            return False
        shift_ids = {s["id"] for s in self.tables["shift"] if s["schedule_id"] == p_schedule_id}
        self.remove("user_shift_signup", [
            s for s in self.tables["user_shift_signup"]
            if s["user_id"] == p_member_id and s["shift_id"] in shift_ids
        ])
        self.remove("user_schedule_membership", [
            m for m in self.tables["user_schedule_membership"]
            if m["user_id"] == p_member_id and m["schedule_id"] == p_schedule_id
        ])
        return True

    def rpc_create_shift(self, p_user_id, p_schedule_id, p_start_time, p_end_time,
                         p_shift_name=None, p_shift_description=None):
        if self.role(p_user_id, p_schedule_id) not in ("owner", "manager"):
            return []
        return [dict(self.insert("shift", {
            "schedule_id": p_schedule_id,
            "start_time": p_start_time,
            "end_time": p_end_time,
            "shift_name": p_shift_name,
            "shift_description": p_shift_description,
        }))]

    def rpc_update_shift(self, p_user_id, p_shift_id, p_start_time, p_end_time,
                         p_shift_name=None, p_shift_description=None):
        shift = self.shift(p_shift_id)
        if shift is None or self.role(p_user_id, shift["schedule_id"]) not in ("owner", "manager"):
            return []
        shift.update({
            "start_time": p_start_time,
            "end_time": p_end_time,
            "shift_name": p_shift_name,
            "shift_description": p_shift_description,
        })
        return [dict(shift)]

    def rpc_delete_shift(self, p_user_id, p_shift_id):
        shift = self.shift(p_shift_id)
        if shift is None or self.role(p_user_id, shift["schedule_id"]) not in ("owner", "manager"):
            return False
        self.remove("shift", [shift])
        return True

    def _can_manage_signup(self, user_id, target_user_id, schedule_id):
        if user_id == target_user_id:
            return self.role(user_id, schedule_id) == "member"
        return (self.role(user_id, schedule_id) in ("owner", "manager")
                and self.role(target_user_id, schedule_id) == "member")

    def rpc_add_shift_signup(self, p_user_id, p_target_user_id, p_shift_id, p_weight=1):
        shift = self.shift(p_shift_id)
        if shift is None or not self._can_manage_signup(p_user_id, p_target_user_id, shift["schedule_id"]):
            return False
        try:
            self.insert("user_shift_signup", {
                "user_id": p_target_user_id,
                "shift_id": p_shift_id,
                "user_weighting": p_weight,
            })
        except APIError:
            pass  # on conflict do nothing
        return True

    def rpc_remove_shift_signup(self, p_user_id, p_target_user_id, p_shift_id):
        shift = self.shift(p_shift_id)
        if shift is None or not self._can_manage_signup(p_user_id, p_target_user_id, shift["schedule_id"]):
            return False
        rows = [s for s in self.tables["user_shift_signup"]
                if s["user_id"] == p_target_user_id and s["shift_id"] == p_shift_id]
        self.remove("user_shift_signup", rows)
        return True

    # test helpers

    def add_user(self, email, username):
        return self.insert("user_account", {"email": email, "username": username})

    def signups(self, shift_id):
        return [s for s in self.tables["user_shift_signup"] if s["shift_id"] == shift_id]


def make_token(email, name="Test User", secret=None, expires_in=timedelta(hours=1), **claims):
    payload = {"email": email, "name": name, **claims}
    if expires_in is not None:
        payload["exp"] = datetime.now(timezone.utc) + expires_in
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


def auth(user):
    return {"Authorization": f"Bearer {make_token(user['email'], user['username'])}"}


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_supabase] = lambda: db
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def world(db):
    """A schedule owned by `owner`, with a manager, two members and one shift. `outsider` has no role."""
    owner = db.add_user("owner@example.com", "Olivia")
    manager = db.add_user("manager@example.com", "Manny")
    member = db.add_user("member@example.com", "Mia")
    other_member = db.add_user("other@example.com", "Max")
    outsider = db.add_user("outsider@example.com", "Otto")

    schedule = db.insert("schedule", {
        "owner_id": owner["id"],
        "schedule_name": "Front desk",
        "schedule_description": "Weekday coverage",
    })
    for user, role in ((manager, "manager"), (member, "member"), (other_member, "member")):
        db.insert("user_schedule_membership", {
            "user_id": user["id"], "schedule_id": schedule["id"], "user_role": role
        })
    shift = db.insert("shift", {
        "schedule_id": schedule["id"],
        "start_time": "2024-05-01T09:00:00",
        "end_time": "2024-05-01T17:00:00",
    })
    return SimpleNamespace(
        owner=owner, manager=manager, member=member, other_member=other_member,
        outsider=outsider, schedule=schedule, shift=shift,
    )
