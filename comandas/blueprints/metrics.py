"""
Prometheus metrics blueprint.

Exposes /metrics with HTTP request metrics plus order and push-notification
counters. Restrict it to the monitoring network; it is not authenticated.
"""
from flask import Blueprint, Response, request, g
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CollectorRegistry, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess, REGISTRY
import time
import os

metrics_bp = Blueprint('metrics', __name__)

# Gunicorn workers share metrics through PROMETHEUS_MULTIPROC_DIR
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
else:
    registry = REGISTRY

_metric_registry = registry if not MULTIPROCESS_MODE else None

# HTTP
http_requests_total = Counter(
    'comandas_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'http_status'],
    registry=_metric_registry
)

http_request_duration_seconds = Histogram(
    'comandas_http_request_duration_seconds',
    'HTTP request latency in seconds',
    ['method', 'endpoint'],
    registry=_metric_registry,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_requests_in_flight = Gauge(
    'comandas_http_requests_in_flight',
    'HTTP requests currently being processed',
    registry=_metric_registry
)

# Orders and notifications
orders_created_total = Counter(
    'comandas_orders_created_total',
    'Orders created',
    registry=_metric_registry
)

push_notifications_total = Counter(
    'comandas_push_notifications_total',
    'Order-closed push deliveries by result (sent, failed, gone)',
    ['result'],
    registry=_metric_registry
)


def setup_metrics_instrumentation(app):
    """Register the request hooks that feed the HTTP metrics."""

    @app.before_request
    def start_request_timer():
        g._metrics_start_time = time.time()
        http_requests_in_flight.inc()

    @app.after_request
    def record_request_metrics(response):
        try:
            started = g.pop('_metrics_start_time', None)
            if started is not None:
                # Blueprint endpoint name, e.g. 'orders.create_order'
                endpoint = request.endpoint or 'unknown'
                http_request_duration_seconds.labels(
                    method=request.method,
                    endpoint=endpoint
                ).observe(time.time() - started)
                http_requests_total.labels(
                    method=request.method,
                    endpoint=endpoint,
                    http_status=response.status_code
                ).inc()
                http_requests_in_flight.dec()
        except Exception as e:
            # Metrics never break a response
            app.logger.warning(f"Failed to record metrics: {e}")

        return response


@metrics_bp.route('/metrics')
def metrics():
    """Prometheus scrape endpoint (text exposition format)."""
    data = generate_latest(registry)
    return Response(data, mimetype=CONTENT_TYPE_LATEST)
