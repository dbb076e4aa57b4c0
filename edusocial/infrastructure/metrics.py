from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# HTTP
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint']
)

# Domain events
users_registered_total = Counter('users_registered_total', 'Total registered users', ['role'])
assignments_created_total = Counter('assignments_created_total', 'Total assignments created')
submissions_total = Counter('submissions_total', 'Total assignment submissions')
uploads_total = Counter('uploads_total', 'Total uploaded files', ['kind'])

def metrics_endpoint():
    """Prometheus metrics endpoint"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
