# Table: shift
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected table structure:

shift:
- id: uuid (primary key)
- schedule_id: uuid (foreign key to schedule.id, not null)
- shift_name: text (nullable)
- shift_description: text (nullable)
- start_time: timestamp (not null, naive UTC)
- end_time: timestamp (not null, naive UTC)
- check constraint start_time < end_time

Writes go through the create_shift / update_shift / delete_shift functions,
which re-check that the caller is owner or manager of the shift's schedule.
"""
