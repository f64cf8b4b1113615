from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class DocumentResponse(BaseModel):
    id: str
    project_id: str
    name: str
    type: Optional[str] = None
    size: int
    file_path: str
    uploaded_by: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DocumentUrlResponse(BaseModel):
    document_id: str
    url: str
    expires_in: int
