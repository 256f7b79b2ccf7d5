from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional

from doclens.config import config


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Document(CamelModel):
    id: str
    title: str
    content: str
    file_type: str
    file_name: str
    file_size: int = Field(..., ge=0)
    storage_id: Optional[str] = None
    file_url: Optional[str] = None
    category: str = "general"
    tags: List[str] = Field(default_factory=list, max_length=config.max_tags)
    project: Optional[str] = None
    team: Optional[str] = None
    uploaded_by: str
    uploaded_at: int
    last_modified: int
    indexed_at: int


class DocumentCreate(CamelModel):
    title: str
    content: str
    file_type: str
    file_name: str
    file_size: int = Field(..., ge=0)
    storage_id: Optional[str] = None
    file_url: Optional[str] = None
    project: Optional[str] = None
    team: Optional[str] = None
    uploaded_by: str


class DocumentUpdate(CamelModel):
    """Partial update; fields left as None are not changed."""
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    project: Optional[str] = None
    team: Optional[str] = None
    tags: Optional[List[str]] = None
    file_type: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)
    storage_id: Optional[str] = None
    file_url: Optional[str] = None


class DocumentCreated(BaseModel):
    id: str


class UploadHandle(CamelModel):
    storage_id: str
    upload_url: str


class SaveFileRequest(CamelModel):
    storage_id: str
    file_name: str
    file_type: str
    title: str
    content: str
    file_size: int = Field(..., ge=0)
    project: Optional[str] = None
    team: Optional[str] = None
    uploaded_by: str


class SaveFileResponse(CamelModel):
    document_id: str
    storage_id: str


class DownloadUrl(BaseModel):
    url: Optional[str] = None
