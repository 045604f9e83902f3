# Supabase table: uploads (files live in the badge-images storage bucket)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

uploads:
- id: uuid (primary key)
- user_id: uuid (nullable) - NULL for anonymous uploads
- image_url: text (not null) - public URL of {user_id|anonymous}/{timestamp}.{ext}
- badge_guess_id: uuid (foreign key to badges.id, nullable)
- created_at: timestamp (default: now())
"""
