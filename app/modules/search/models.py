# Supabase tables: ai_search_feedback (plus analytics_searches, see matching/models.py)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

ai_search_feedback:
- id: uuid (primary key)
- user_id: uuid (nullable, anonymous feedback allowed)
- search_query: text (not null)
- ai_result: jsonb (nullable)
- feedback_type: text ('helpful' | 'not_helpful' | 'incorrect' | 'spam')
- source_url: text (nullable)
- notes: text (nullable)
- created_at: timestamp (default: now())
"""
