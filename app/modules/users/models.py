# Supabase tables: users, user_skills
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, references auth.users.id)
- full_name: text (nullable)
- email: text (nullable)
- avatar_url: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

user_skills:
- id: uuid (primary key)
- user_id: uuid (foreign key to users.id)
- skill_name: text (not null)
- proficiency: text (nullable) - values: beginner, intermediate, advanced, expert
- created_at: timestamp (default: now())

profiles (view): id, email, full_name, avatar_url
"""
