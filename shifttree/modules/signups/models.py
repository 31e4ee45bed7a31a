# Table: user_shift_signup
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected table structure:

user_shift_signup:
- id: uuid (primary key)
- user_id: uuid (foreign key to user_account.id, not null)
- shift_id: uuid (foreign key to shift.id, not null, on delete cascade)
- user_weighting: integer (not null, default: 1) - exposed as weight
- unique constraint on (user_id, shift_id)

Writes go through add_shift_signup / remove_shift_signup. Both apply the
self-service / delegated rule again inside the database; add uses
"on conflict do nothing" so repeated signups are no-ops.
"""
