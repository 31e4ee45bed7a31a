# Table: user_account
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# The full DDL lives in shifttree/database/schema.sql

"""
Expected table structure:

user_account:
- id: uuid (primary key, default: gen_random_uuid())
- email: text (unique, not null) - matched against the token's "email" claim
- username: text (not null) - exposed as displayName
- created: timestamp (default: now() at time zone 'utc')

Tokens are issued outside this service. They are HS256 JWTs signed with
JWT_SECRET and carry "email" and "name" claims; the account must already exist.
"""
