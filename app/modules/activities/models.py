# Supabase table: activities
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- project_id: uuid (foreign key to projects.id, not null)
- task_id: uuid (foreign key to tasks.id, nullable)
- user_id: uuid (foreign key to users.id, not null)
- type: text (not null) - task_update | comment | member_join | project_update | document_upload
- description: text (not null)
- created_at: timestamp (default: now())

Rows are append-only. Realtime subscriptions on this table drive the
dashboard feed in the browser.
"""
