# Supabase table: user_roles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_roles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- role: text ('admin' | 'moderator' | 'user', not null)
- created_at: timestamp (default: now())
- unique constraint on (user_id, role)

Maker status is not a row here; it lives on profiles (role, maker_approved).
Permission names are not stored: they are derived from
app.config.permissions_config for the user's effective roles.
"""
