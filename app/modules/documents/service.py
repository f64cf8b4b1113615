import logging
import os
import uuid
from datetime import datetime, timezone
from fastapi import HTTPException, UploadFile
from supabase import Client
from app.modules.documents.schemas import DocumentResponse, DocumentUrlResponse
from app.modules.documents.storage import get_document_storage
from app.modules.activities.service import ActivityService
from app.core.dependencies import get_user_full_name
from app.config import settings
from typing import List, Dict, Any

logger = logging.getLogger(__name__)


def build_object_key(project_id: str, filename: str) -> str:
    """{project_id}/{uuid}-{filename}, with any directory part of the name dropped"""
    safe_name = os.path.basename(filename.replace("\\", "/")) or "file"
    return f"{project_id}/{uuid.uuid4()}-{safe_name}"


class DocumentService:
    def __init__(self, supabase: Client, storage=None):
        self.supabase = supabase
        self.storage = storage or get_document_storage(supabase)
        self.activities = ActivityService(supabase)

    def _get_document_row(self, project_id: str, document_id: str) -> Dict[str, Any]:
        result = self.supabase.table("documents")\
            .select("*")\
            .eq("id", document_id)\
            .eq("project_id", project_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Document not found")
        return result.data[0]

    async def upload_document(self, project_id: str, file: UploadFile, user_id: str) -> DocumentResponse:
        """Store the file, then its documents row; the object is removed again if the row fails"""
        if not file.filename:
            raise HTTPException(status_code=400, detail="File name is required")

        file_content = await file.read()
        if len(file_content) > settings.max_upload_size_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File exceeds the {settings.max_upload_size_mb} MB upload limit"
            )

        content_type = file.content_type or "application/octet-stream"
        key = build_object_key(project_id, file.filename)
        try:
            self.storage.upload_file(file_content, key, content_type)
            logger.info(f"Uploaded document to storage: {key}")
        except Exception as e:
            logger.error(f"Document upload failed: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Failed to upload to storage: {str(e)}")

        try:
            result = self.supabase.table("documents").insert({
                "project_id": project_id,
                "name": file.filename,
                "type": content_type,
                "size": len(file_content),
                "file_path": key,
                "uploaded_by": user_id,
                "uploaded_at": datetime.now(timezone.utc).isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save document")
        except Exception as e:
            logger.error(f"Error saving document row, removing {key}: {e}")
            self.storage.delete_file(key)
            if isinstance(e, HTTPException):
                raise
            raise HTTPException(status_code=500, detail=str(e))

        actor_name = get_user_full_name(user_id, self.supabase)
        self.activities.record(project_id, user_id, "document_upload", f"{actor_name} uploaded {file.filename}")
        return DocumentResponse(**result.data[0])

    def list_documents(self, project_id: str) -> List[DocumentResponse]:
        """List a project's documents, newest first"""
        try:
            result = self.supabase.table("documents")\
                .select("*")\
                .eq("project_id", project_id)\
                .order("uploaded_at", desc=True)\
                .execute()
            return [DocumentResponse(**d) for d in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_download_url(self, project_id: str, document_id: str) -> DocumentUrlResponse:
        """Time-limited download URL for a document"""
        try:
            document = self._get_document_row(project_id, document_id)
            expires_in = settings.signed_url_ttl_seconds
            url = self.storage.signed_url(document["file_path"], expires_in)
            return DocumentUrlResponse(document_id=document_id, url=url, expires_in=expires_in)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating signed URL for document {document_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create download link")

    def delete_document(self, project_id: str, document_id: str) -> bool:
        """Delete the row through the database function, then the stored object"""
        try:
            document = self._get_document_row(project_id, document_id)
            self.supabase.rpc("delete_document_with_relations", {
                "document_id": document_id,
                "project_id": project_id
            }).execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error deleting document {document_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        if not self.storage.delete_file(document["file_path"]):
            logger.warning(f"Document {document_id} deleted but {document['file_path']} is still in storage")
        return True
