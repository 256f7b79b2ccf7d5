import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.concurrency import run_in_threadpool
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from doclens import documents, facets
from doclens.config import config
from doclens.errors import ApplicationError
from doclens.files import FileGateway, save_file
from doclens.metrics import PrometheusMiddleware, record_error, record_search_request
from doclens.models import (
    Document, DocumentCreate, DocumentCreated, DocumentUpdate, DownloadUrl,
    SaveFileRequest, SaveFileResponse, UploadHandle,
)
from doclens.search import search
from doclens.store import DocumentStore, check_store_connection, create_store, wait_for_store

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = create_store(config.store_backend)
    app.state.gateway = FileGateway()
    wait_for_store(app.state.store)
    logger.info(f"DocLens started with '{config.store_backend}' store")
    try:
        yield
    finally:
        logger.info("DocLens shutting down")

app = FastAPI(
    title="DocLens Document Service",
    description="Document indexing, keyword search and faceted browsing",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(PrometheusMiddleware)

def get_store(request: Request) -> DocumentStore:
    return request.app.state.store

def get_gateway(request: Request) -> FileGateway:
    return request.app.state.gateway

@app.exception_handler(ApplicationError)
async def handle_application_error(request: Request, exc: ApplicationError):
    record_error(exc.code)
    logger.error(f"{request.method} {request.url.path} failed: [{exc.code}] {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})

@app.get("/")
def root(store: DocumentStore = Depends(get_store)):
    return {"status": "ok", "service": "doclens", "store_connected": check_store_connection(store)}

@app.get("/metrics")
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

# ── Documents ──────────────────────────────────────────────────────────────────

@app.post("/documents", response_model=DocumentCreated, status_code=201)
def create_document(fields: DocumentCreate, store: DocumentStore = Depends(get_store)):
    return DocumentCreated(id=documents.create_document(store, fields))

@app.get("/documents/search", response_model=List[Document])
def search_documents(
    query: str = "",
    category: Optional[str] = None,
    team: Optional[str] = None,
    project: Optional[str] = None,
    file_type: Optional[str] = Query(None, alias="fileType"),
    limit: Optional[int] = Query(None, ge=1),
    store: DocumentStore = Depends(get_store),
):
    results = search(
        documents.list_documents(store),
        query,
        category=category,
        team=team,
        project=project,
        file_type=file_type,
        limit=limit,
    )
    record_search_request(bool(query.strip()), len(results))
    return results

@app.get("/documents/recent", response_model=List[Document])
def list_recent_documents(
    limit: Optional[int] = Query(None, ge=1),
    store: DocumentStore = Depends(get_store),
):
    return facets.list_recent(documents.list_documents(store), limit)

@app.get("/documents/{doc_id}", response_model=Optional[Document])
def get_document(doc_id: str, store: DocumentStore = Depends(get_store)):
    return documents.get_document(store, doc_id)

@app.patch("/documents/{doc_id}", response_model=Document)
def update_document(doc_id: str, fields: DocumentUpdate, store: DocumentStore = Depends(get_store)):
    return documents.update_document(store, doc_id, fields)

@app.delete("/documents/{doc_id}", status_code=204)
def delete_document(doc_id: str, store: DocumentStore = Depends(get_store)):
    documents.delete_document(store, doc_id)
    return Response(status_code=204)

# ── Facets ─────────────────────────────────────────────────────────────────────

@app.get("/facets/categories", response_model=List[str])
def list_categories(store: DocumentStore = Depends(get_store)):
    return facets.list_categories(documents.list_documents(store))

@app.get("/facets/teams", response_model=List[str])
def list_teams(store: DocumentStore = Depends(get_store)):
    return facets.list_teams(documents.list_documents(store))

@app.get("/facets/projects", response_model=List[str])
def list_projects(store: DocumentStore = Depends(get_store)):
    return facets.list_projects(documents.list_documents(store))

# ── Files ──────────────────────────────────────────────────────────────────────

@app.post("/files/upload-url", response_model=UploadHandle)
def generate_upload_url(gateway: FileGateway = Depends(get_gateway)):
    return gateway.generate_upload_handle()

@app.post("/files/save", response_model=SaveFileResponse, status_code=201)
def save_uploaded_file(
    request: SaveFileRequest,
    store: DocumentStore = Depends(get_store),
    gateway: FileGateway = Depends(get_gateway),
):
    return save_file(store, gateway, request)

@app.put("/files/{storage_id}")
async def upload_file(storage_id: str, request: Request, gateway: FileGateway = Depends(get_gateway)):
    data = await request.body()
    size = await run_in_threadpool(gateway.save_blob, storage_id, data)
    return {"storageId": storage_id, "size": size}

@app.get("/files/{storage_id}/url", response_model=DownloadUrl)
def get_file_url(storage_id: str, gateway: FileGateway = Depends(get_gateway)):
    return DownloadUrl(url=gateway.resolve_download_url(storage_id))

@app.get("/files/{storage_id}")
def download_file(storage_id: str, gateway: FileGateway = Depends(get_gateway)):
    path = gateway.open_blob(storage_id)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.api_host, port=config.api_port)
