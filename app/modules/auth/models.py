# Supabase Auth
# Sign-in is delegated to Supabase Auth (Google OAuth). No custom tables are
# required for authentication itself; the app keeps its own data in:
# - profiles    one row per auth.users row, created by a database trigger
# - user_roles  application roles (admin, moderator, user)

"""
Supabase Auth provides:
- auth.sign_in_with_oauth() - Start an OAuth flow (Google)
- auth.get_user() - Resolve the current user from a JWT access token
- auth.sign_out() - End the session

The access token issued to the browser is sent to this API as
"Authorization: Bearer <token>" and resolved through auth.get_user().
"""
