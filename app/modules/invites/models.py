# Supabase table: project_invites
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- project_id: uuid (foreign key to projects.id)
- token: text (unique, not null) - random uuid4 embedded in the join link
- expires_at: timestamp (nullable) - created_at + INVITE_TTL_DAYS
- created_at: timestamp (default: now())

Invites are reusable until they expire; accepting one adds the caller as a
'member' of the project.
"""
