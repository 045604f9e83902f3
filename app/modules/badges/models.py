# Supabase table: badges
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

badges:
- id: uuid (primary key)
- name: text (not null)
- year: int (nullable)
- description: text (nullable)
- external_link: text (nullable)
- image_url: text (nullable) - primary photo, mirrored from badge_images
- maker_id: uuid (foreign key to profiles.id, nullable) - submitter
- team_name: text (nullable) - team that made the badge, matched against profiles.assigned_team
- category: text ('Elect Badge' | 'None Elect Badge' | 'SAO' | 'Tool' | 'Misc')
- retired: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Badges have no moderation status column; approve/reject only notify.
"""
