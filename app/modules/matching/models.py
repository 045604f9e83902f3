# Supabase tables: badge_embeddings, badge_confirmations, analytics_searches
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

badge_embeddings:
- id: uuid (primary key)
- badge_id: uuid (foreign key to badges.id, not null)
- embedding: float8[] (CLIP image features)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

badge_confirmations:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- badge_id: uuid (foreign key to badges.id, not null)
- confidence_at_time: int (0-100, confidence shown to the user)
- similarity_score: float (0-1)
- confirmation_type: text (default: 'correct_match')
- created_at: timestamp (default: now())

analytics_searches:
- id: uuid (primary key)
- search_type: text ('image_analysis')
- image_matching_duration_ms: int
- total_duration_ms: int
- results_found: int
- best_confidence_score: int
- found_in_database: boolean
- found_via_web_search: boolean
- found_via_image_matching: boolean
- search_source_used: text (nullable)
- created_at: timestamp (default: now())

Embeddings and analytics are written with the service-role client.
"""
