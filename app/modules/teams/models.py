# Supabase tables: teams, team_members, team_requests
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

teams:
- id: uuid (primary key)
- name: text (not null, unique) - matches badges.team_name and profiles.assigned_team
- description: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

team_members:
- id: uuid (primary key)
- team_id: uuid (foreign key to teams.id, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (team_id, user_id)

team_requests:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- team_name: text (not null) - may name a team that does not exist yet
- status: text ('pending' | 'approved' | 'rejected', default: 'pending')
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
