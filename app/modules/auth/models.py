# Supabase Auth
# This module uses Supabase's built-in authentication system.
# Supabase Auth handles:
# - User registration (auth.users table)
# - User login and session management
# - JWT token generation and validation
# - Password hashing and security

"""
Supabase Auth provides:
- auth.admin.create_user() - Register users without confirming their email
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.exchange_code_for_session() - OAuth / magic-link callback
- auth.admin.update_user_by_id() - Mark email as verified

Email verification is done with our own six-digit codes:

email_verification_codes:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- email: text (not null)
- code: text (not null) - six digits
- expires_at: timestamp (not null) - created_at + 10 minutes
- used: boolean (not null, default: false)
- created_at: timestamp (default: now())

users (public profile row, created at signup or OAuth callback):
- id: uuid (primary key, same as auth.users.id)
- full_name: text (nullable)
- email: text (nullable)
- avatar_url: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
