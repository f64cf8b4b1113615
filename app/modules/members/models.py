# Supabase table: project_members (documented in app/modules/projects/models.py)
# Member profiles are read from the users table.

"""
Role rules:
- owner: manage members and roles, edit and delete the project
- member: create and edit tasks and documents
- viewer: read only
Every project keeps at least one owner.
"""
