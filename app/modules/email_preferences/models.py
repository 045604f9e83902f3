# Supabase table: email_preferences
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

email_preferences:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null, unique)
- badge_submission_notifications: boolean (default: false)
- badge_approval_notifications: boolean (default: false)
- badge_rejection_notifications: boolean (default: false)
- weekly_digest_emails: boolean (default: false)
- system_announcements: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Opt-in: a row is created with every flag false the first time it is read.
"""
