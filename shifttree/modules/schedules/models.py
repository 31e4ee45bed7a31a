# Tables: schedule, user_schedule_membership, view schedule_info
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected table structure:

schedule:
- id: uuid (primary key)
- owner_id: uuid (foreign key to user_account.id, not null)
- schedule_name: text (not null)
- schedule_description: text (nullable)
- created: timestamp (default: now() at time zone 'utc')
- removed: timestamp (nullable) - soft delete marker

user_schedule_membership:
- id: uuid (primary key)
- user_id: uuid (foreign key to user_account.id, not null)
- schedule_id: uuid (foreign key to schedule.id, not null)
- user_role: text (not null, default: 'member') - values: manager, member
- unique constraint on (user_id, schedule_id)

schedule_info (view, removed schedules excluded):
- schedule_id, schedule_name, schedule_description, owner_id
- user_id, user_role - the owner with role 'owner', plus one row per membership
- start_time, end_time - earliest shift start / latest shift end (null without shifts)
"""
