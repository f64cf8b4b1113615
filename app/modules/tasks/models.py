# Supabase table: tasks
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- project_id: uuid (foreign key to projects.id, not null)
- title: text (not null)
- description: text (nullable)
- status: text (default: 'todo') - todo | in_progress | review | done
- priority: text (default: 'medium') - low | medium | high
- assignee_id: uuid (foreign key to users.id, nullable)
- due_date: date (nullable)
- created_by: uuid (foreign key to users.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Task history lives in the activities table (task_id set).
Database function get_user_email(user_id uuid) returns auth.users.email and is
used to address task notifications.
"""
