# Supabase table: ownership
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

ownership:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- badge_id: uuid (foreign key to badges.id, not null)
- status: text ('own' | 'want')
- created_at: timestamp (default: now())
- unique (user_id, badge_id, status)

A user can both own and want the same badge (two rows).
"""
