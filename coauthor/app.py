"""
Coauthor API - Flask Application Factory

This module builds the Flask application with OpenAPI support, wires the
storage, blocklist and token services into the concepts, and registers the
route table together with the middleware.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from flask import jsonify
from flask_openapi3 import Info, OpenAPI
import logging

from .concepts import Concepts, build_concepts
from .config import load_config
from .errors import AppError
from .middleware.auth import AuthMiddleware
from .middleware.error_handler import ErrorHandlerMiddleware
from .observability.config import SERVICE_NAME, setup_observability
from .observability.middleware import add_observability_middleware
from .routes.table import register_routes
from .services.auth import AuthService
from .services.health import HealthCheckService
from .services.mongodb import MongoDBService
from .services.redis import RedisService

logger = logging.getLogger(__name__)

# OpenAPI info
info = Info(
    title="Coauthor API",
    version="1.0.0",
    description="Collaborative drafting, multi-approver publishing, events and friends"
)


def create_app(
    config: Optional[Dict[str, Any]] = None,
    concepts: Optional[Concepts] = None,
    mongodb_service: Optional[MongoDBService] = None,
    redis_service: Optional[RedisService] = None,
    auth_service: Optional[AuthService] = None,
) -> OpenAPI:
    """
    Build the application.

    Args:
        config: Overrides applied on top of the environment configuration
        concepts: Pre-built concepts (tests)
        mongodb_service: Storage service; built from MONGODB_URI when omitted
        redis_service: Blocklist service; built from REDIS_URL when omitted
        auth_service: Token service; built from the JWT key pair when omitted
    """
    settings = load_config()
    settings.update(config or {})

    otel_enabled = setup_observability(settings)

    app = OpenAPI(__name__, info=info, doc_ui=settings['DOCS_ENABLED'])
    app.config.update(settings)

    add_observability_middleware(app, instrument=otel_enabled)

    # Initialize services
    if mongodb_service is None:
        mongodb_service = MongoDBService(
            settings['MONGODB_URI'],
            settings['MONGODB_DATABASE'],
            max_retries=settings['MONGODB_MAX_RETRIES'],
            operation_timeout=settings['MONGODB_OPERATION_TIMEOUT'],
            retry_factor=settings['MONGODB_RETRY_FACTOR']
        )
    if redis_service is None:
        redis_service = RedisService(settings['REDIS_URL'])
    if auth_service is None:
        auth_service = AuthService(
            settings['JWT_PRIVATE_KEY'],
            settings['JWT_PUBLIC_KEY'],
            settings['JWT_ACCESS_TOKEN_EXPIRES_MINUTES']
        )
    if concepts is None:
        concepts = build_concepts(mongodb_service, auth_service, settings['POST_THEMES'])

    try:
        mongodb_service.create_indexes()
    except AppError as e:
        # Storage may come up after the API; requests report 503 until it does
        logger.warning(f"Skipping index creation: {e.raw_message()}")

    health_service = HealthCheckService(mongodb_service, redis_service)

    # Make services available to routes
    app.mongodb_service = mongodb_service
    app.redis_service = redis_service
    app.auth_service = auth_service
    app.health_service = health_service
    app.concepts = concepts
    app.auth_middleware = AuthMiddleware(auth_service, redis_service)
    app.error_handler = ErrorHandlerMiddleware(app)

    register_routes(app)

    @app.route('/api/healthz')
    def health_check():
        """Dependency health; 503 when storage is down."""
        try:
            health_data = health_service.get_health()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return jsonify({
                "status": "unhealthy",
                "service": SERVICE_NAME,
                "environment": settings['ENVIRONMENT'],
                "timestamp": datetime.utcnow().isoformat() + "Z",
                "error": f"Health check service failed: {str(e)}"
            }), 503

        status_code = 503 if health_data["status"] == "unhealthy" else 200
        return jsonify(health_data), status_code

    logger.info(
        "Application created",
        extra={"environment": settings['ENVIRONMENT'], "docs_enabled": settings['DOCS_ENABLED']}
    )
    return app


if __name__ == '__main__':
    application = create_app()
    application.run(
        host='0.0.0.0',
        port=5000,
        debug=application.config['DEBUG']
    )
