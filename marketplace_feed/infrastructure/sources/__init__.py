"""Read-only source connectors feeding the activity engine."""

from .base import (
    DEFAULT_SOURCE_LIMIT,
    ChangePredicate,
    ConnectorResult,
    Filters,
    SourceConnector,
    run_connector,
)
from .connectors import (
    ACTIVITY_CONNECTORS,
    NOTIFICATION_CONNECTOR,
    connector_filters,
    connectors_for,
)

__all__ = [
    "ACTIVITY_CONNECTORS",
    "ChangePredicate",
    "ConnectorResult",
    "DEFAULT_SOURCE_LIMIT",
    "Filters",
    "NOTIFICATION_CONNECTOR",
    "SourceConnector",
    "connector_filters",
    "connectors_for",
    "run_connector",
]
