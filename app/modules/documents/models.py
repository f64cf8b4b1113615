# Supabase table: documents
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- project_id: uuid (foreign key to projects.id, not null)
- name: text (not null) - original file name
- type: text (nullable) - MIME type
- size: bigint (not null) - bytes
- file_path: text (not null) - object key, {project_id}/{uuid}-{name}
- uploaded_by: uuid (foreign key to users.id)
- uploaded_at: timestamp (default: now())

File bytes live in the Supabase Storage bucket DOCUMENTS_BUCKET, or in the
S3 bucket S3_BUCKET_NAME when AWS credentials are configured.
Database function delete_document_with_relations(document_id uuid, project_id uuid)
removes the row together with anything referencing it.
"""
