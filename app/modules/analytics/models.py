# Supabase tables read by the analytics summaries
# Rows are written elsewhere: api_call_logs by app.core.api_logger,
# analytics_searches by the matching and search services.

"""
Expected Supabase table structure:

api_call_logs:
- id: uuid (primary key)
- user_id: uuid (nullable)
- api_provider: text (replicate, serpapi, perplexity, openai, discord, resend)
- endpoint: text
- method: text
- request_data: jsonb (secrets redacted)
- response_status: integer (nullable)
- response_time_ms: integer (nullable)
- tokens_used: integer (nullable, token-billed providers)
- estimated_cost_usd: numeric
- success: boolean
- error_message: text (nullable)
- created_at: timestamp (default: now())

analytics_searches:
- id: uuid (primary key)
- search_type: text (image_analysis, google_image_search, ai_analysis)
- ai_analysis_duration_ms: integer (nullable)
- total_duration_ms: integer
- results_found: integer
- best_confidence_score: integer
- found_in_database: boolean
- found_via_web_search: boolean
- found_via_image_matching: boolean
- search_source_used: text (nullable)
- created_at: timestamp (default: now())
"""
