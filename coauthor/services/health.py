"""
Health Check Service

Reports the status of the storage and token blocklist dependencies
together with basic process metrics.
"""

import os
import time
import psutil
from datetime import datetime
from typing import Any, Dict
from opentelemetry import trace

tracer = trace.get_tracer(__name__)


class HealthCheckService:
    """Service for system health monitoring."""

    def __init__(self, mongodb_service, redis_service):
        self.mongodb_service = mongodb_service
        self.redis_service = redis_service
        self.service_version = "1.0.0"

    def get_health(self) -> Dict[str, Any]:
        """Get health status of all dependencies."""
        with tracer.start_as_current_span("health.check") as span:
            start_time = time.time()

            mongodb_health = self.mongodb_service.health_check()
            redis_health = self.redis_service.health_check()

            overall_status = self._determine_overall_status(
                mongodb_health["status"],
                redis_health["status"]
            )
            response_time_ms = round((time.time() - start_time) * 1000, 2)

            span.set_attributes({
                "health.overall_status": overall_status,
                "health.mongodb_status": mongodb_health["status"],
                "health.redis_status": redis_health["status"]
            })

            return {
                "status": overall_status,
                "service": "coauthor-api",
                "version": self.service_version,
                "environment": os.getenv('ENVIRONMENT', 'development'),
                "timestamp": datetime.utcnow().isoformat() + "Z",
                "response_time_ms": response_time_ms,
                "dependencies": {
                    "mongodb": mongodb_health,
                    "redis": redis_health
                },
                "system_metrics": self._get_system_metrics()
            }

    @staticmethod
    def _determine_overall_status(mongodb_status: str, redis_status: str) -> str:
        # Storage is required; the blocklist only degrades logout.
        if mongodb_status != "healthy":
            return "unhealthy"
        if redis_status != "healthy":
            return "degraded"
        return "healthy"

    @staticmethod
    def _get_system_metrics() -> Dict[str, Any]:
        try:
            process = psutil.Process(os.getpid())
            memory = process.memory_info()
            return {
                "memory_rss_mb": round(memory.rss / (1024 * 1024), 2),
                "cpu_percent": process.cpu_percent(interval=None),
                "uptime_seconds": round(time.time() - process.create_time(), 2)
            }
        except psutil.Error as e:
            return {"error": f"Failed to collect metrics: {str(e)}"}
