import time
from prometheus_client import Counter, Histogram, Gauge
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import logging

logger = logging.getLogger(__name__)

# Request metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code']
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Document lifecycle metrics
DOCUMENTS_INDEXED = Counter(
    'documents_indexed_total',
    'Total documents indexed',
    ['file_type']
)

DOCUMENTS_UPDATED = Counter(
    'documents_updated_total',
    'Total document updates',
    ['reindexed']
)

DOCUMENTS_DELETED = Counter(
    'documents_deleted_total',
    'Total document deletions'
)

SEARCH_REQUESTS = Counter(
    'search_requests_total',
    'Total search requests',
    ['has_query']
)

SEARCH_RESULTS = Histogram(
    'search_results_count',
    'Number of search results returned',
    buckets=[0, 1, 5, 10, 25, 50, 100]
)

# Datastore metrics
STORE_OPERATIONS = Counter(
    'store_operations_total',
    'Total datastore operations',
    ['operation', 'status']
)

STORE_OPERATION_DURATION = Histogram(
    'store_operation_duration_seconds',
    'Datastore operation duration in seconds',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0]
)

STORE_CONNECTION_STATUS = Gauge(
    'store_connection_status',
    'Datastore connection status (1=connected, 0=disconnected)'
)

ERRORS = Counter(
    'doclens_errors_total',
    'Application errors returned to callers',
    ['code']
)

# File upload metrics
FILE_UPLOADS = Counter(
    'file_uploads_total',
    'Total file uploads',
    ['status']
)

FILE_UPLOAD_SIZE = Histogram(
    'file_upload_size_bytes',
    'File upload size in bytes',
    buckets=[1024, 10240, 102400, 1048576, 10485760]
)

class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics"""

    async def dispatch(self, request: Request, call_next):
        # Skip metrics endpoint to avoid recursion
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.time()
        endpoint = self._get_endpoint_pattern(request)
        method = request.method

        try:
            response = await call_next(request)
        except Exception:
            REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=500).inc()
            REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(time.time() - start_time)
            raise

        REQUEST_COUNT.labels(
            method=method,
            endpoint=endpoint,
            status_code=response.status_code
        ).inc()

        REQUEST_DURATION.labels(
            method=method,
            endpoint=endpoint
        ).observe(time.time() - start_time)

        return response

    def _get_endpoint_pattern(self, request: Request) -> str:
        """Collapse ids in the path so label cardinality stays bounded"""
        parts = request.url.path.rstrip("/").split("/")

        if len(parts) >= 3 and parts[1] == "documents" and parts[2] not in ("search", "recent"):
            return "/documents/{doc_id}"
        if len(parts) == 3 and parts[1] == "files" and parts[2] not in ("upload-url", "save"):
            return "/files/{storage_id}"
        if len(parts) == 4 and parts[1] == "files" and parts[3] == "url":
            return "/files/{storage_id}/url"
        return request.url.path

def record_document_indexed(file_type: str):
    """Record when a document is indexed"""
    DOCUMENTS_INDEXED.labels(file_type=file_type).inc()

def record_document_updated(reindexed: bool):
    DOCUMENTS_UPDATED.labels(reindexed=str(reindexed).lower()).inc()

def record_document_deleted():
    DOCUMENTS_DELETED.inc()

def record_search_request(has_query: bool, result_count: int):
    """Record search request metrics"""
    SEARCH_REQUESTS.labels(has_query=str(has_query).lower()).inc()
    SEARCH_RESULTS.observe(result_count)

def record_file_upload(file_size: int, status: str):
    """Record file upload metrics"""
    FILE_UPLOADS.labels(status=status).inc()
    if status == "success":
        FILE_UPLOAD_SIZE.observe(file_size)

def record_store_operation(operation: str, duration: float, status: str):
    """Record datastore operation metrics"""
    STORE_OPERATIONS.labels(operation=operation, status=status).inc()
    if status == "success":
        STORE_OPERATION_DURATION.labels(operation=operation).observe(duration)

def record_error(code: str):
    ERRORS.labels(code=code).inc()

def update_store_connection_status(connected: bool):
    """Update datastore connection status"""
    STORE_CONNECTION_STATUS.set(1 if connected else 0)
