# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""threatwatch - Continuous OSINT threat monitoring and alerting engine."""

__version__ = "0.1.0"

from threatwatch.monitoring.service import MonitoringService

__all__ = [
    "MonitoringService",
    "__version__",
]
