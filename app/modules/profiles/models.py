# Supabase table: profiles (one row per auth user, created by a signup trigger)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, same as auth.users.id)
- email: text (nullable)
- display_name: text (nullable)
- role: text ('user' | 'maker' | 'admin', default: 'user')
- maker_approved: boolean (default: false)
- wants_to_be_maker: boolean (default: false)
- assigned_team: text (nullable) - team name a maker may edit badges for
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Approved maker: role = 'maker' and maker_approved = true.
"""
