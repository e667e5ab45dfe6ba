"""
Prometheus metrics and the HTTP endpoint that exposes them.
"""

import logging
import threading

from flask import Flask, Response, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, Counter, generate_latest

logger = logging.getLogger("owlshop.metrics")


def new_impressions_counter(registry: CollectorRegistry = REGISTRY) -> Counter:
    return Counter(
        "page_impressions_simulated",
        "Number of page impressions simulated",
        namespace="owlshop",
        registry=registry,
    )


PAGE_IMPRESSIONS_SIMULATED = new_impressions_counter()


def create_metrics_app(registry: CollectorRegistry = REGISTRY) -> Flask:
    app = Flask("owlshop.metrics")

    @app.route("/metrics", methods=["GET"])
    def metrics():
        return Response(generate_latest(registry), content_type=CONTENT_TYPE_LATEST)

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "service": "owlshop"}), 200

    return app


def serve_metrics(app: Flask, host: str = "0.0.0.0", port: int = 8080) -> threading.Thread:
    """Serve the metrics app on a daemon thread."""

    def run():
        try:
            app.run(host=host, port=port, debug=False, use_reloader=False)
            logger.info("prometheus http handler quit")
        except Exception as e:
            logger.error("prometheus http handler quit: %s", e)

    t = threading.Thread(target=run, name="metrics-http", daemon=True)
    t.start()
    logger.info("Serving metrics on %s:%d/metrics", host, port)
    return t
