from fastapi import APIRouter, Depends, File, UploadFile
from app.database.supabase_client import get_service_supabase
from app.modules.documents.schemas import DocumentResponse, DocumentUrlResponse
from app.modules.documents.service import DocumentService
from app.core.dependencies import get_verified_user, check_project_access, check_project_editor
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/projects/{project_id}/documents", tags=["documents"])


def get_document_service(supabase: Client = Depends(get_service_supabase)) -> DocumentService:
    return DocumentService(supabase)


@router.post("", response_model=DocumentResponse, status_code=201)
async def upload_document(
    project_id: str,
    file: UploadFile = File(...),
    user_data: Dict = Depends(get_verified_user),
    service: DocumentService = Depends(get_document_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Upload a document to the project (owners and members)"""
    check_project_editor(project_id, user_data, supabase)
    return await service.upload_document(project_id, file, user_data["id"])


@router.get("", response_model=List[DocumentResponse])
async def list_documents(
    project_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: DocumentService = Depends(get_document_service),
    supabase: Client = Depends(get_service_supabase)
):
    """List the project's documents (members only)"""
    check_project_access(project_id, user_data, supabase)
    return service.list_documents(project_id)


@router.get("/{document_id}/url", response_model=DocumentUrlResponse)
async def get_document_url(
    project_id: str,
    document_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: DocumentService = Depends(get_document_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Signed download URL for a document (members only)"""
    check_project_access(project_id, user_data, supabase)
    return service.get_download_url(project_id, document_id)


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    project_id: str,
    document_id: str,
    user_data: Dict = Depends(get_verified_user),
    service: DocumentService = Depends(get_document_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Delete a document (owners and members)"""
    check_project_editor(project_id, user_data, supabase)
    service.delete_document(project_id, document_id)
    return None
