"""HTTP infrastructure."""

from recallbot.infrastructure.http.health_server import HealthServer

__all__ = ["HealthServer"]
