# Supabase table: badge_images (files live in the badge-images storage bucket)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

badge_images:
- id: uuid (primary key)
- badge_id: uuid (foreign key to badges.id, not null)
- image_url: text (not null) - public URL of {badge_id}/{timestamp}.{ext}
- is_primary: boolean (default: false) - at most one per badge
- display_order: int (default: 0)
- caption: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
