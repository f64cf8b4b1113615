# Supabase tables: projects, project_members, project_views
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

projects:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- status: text (default: 'planning') - planning | in_progress | in_review | completed
- progress: integer (default: 0) - percentage of tasks done, 0-100
- color: text (nullable) - one of #8B5CF6, #67E3F9, #FF8A65
- due_date: date (nullable)
- created_by: uuid (foreign key to users.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

project_members:
- project_id: uuid (foreign key to projects.id, not null)
- user_id: uuid (foreign key to users.id, not null)
- role: text (not null) - owner | member | viewer
- created_at: timestamp (default: now())
- primary key on (project_id, user_id)

project_views:
- id: uuid (primary key)
- project_id: uuid (foreign key to projects.id, not null)
- user_id: uuid (foreign key to users.id, not null)
- viewed_at: timestamp (default: now())

Database function create_project_with_owner(project_data jsonb, owner_id uuid)
inserts the project and the owner's project_members row in one transaction
and returns the new project row.
"""
