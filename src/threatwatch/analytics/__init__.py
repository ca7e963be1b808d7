# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Dashboard analytics: rule performance and threat trends."""

from threatwatch.analytics.dashboard import TREND_DAYS, DashboardAggregator

__all__ = [
    "TREND_DAYS",
    "DashboardAggregator",
]
