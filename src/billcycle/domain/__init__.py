"""Domain layer for billcycle application."""

from billcycle.domain.obligation import ObligationService
from billcycle.domain.materializer import Materializer
from billcycle.domain.projection import project, project_with_anomalies

__all__ = [
    "ObligationService",
    "Materializer",
    "project",
    "project_with_anomalies",
]
