# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Diagnostics channel and resolver telemetry.

Nothing in here influences control flow: the resolver and the providers
report into it and move on.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Union

from .exceptions import NoResults, ProviderError, ProviderUnavailable


@dataclass
class DiagnosticEvent:
    provider: str
    operation: str
    error_type: str
    detail: str
    timestamp: float = field(default_factory=time.time)


class DiagnosticsChannel:
    """Sink for (provider, operation, error) tuples."""

    def report(self, provider: str, operation: str, error: Union[BaseException, str]) -> None:
        raise NotImplementedError


class LoggingDiagnostics(DiagnosticsChannel):
    """Logs every report and keeps the most recent ones for health checks."""

    def __init__(self, max_events: int = 100):
        self.logger = logging.getLogger(__name__)
        self._events: Deque[DiagnosticEvent] = deque(maxlen=max_events)

    def report(self, provider: str, operation: str, error: Union[BaseException, str]) -> None:
        if isinstance(error, ProviderError):
            error_type = type(error).__name__
            detail = error.detail
        elif isinstance(error, BaseException):
            error_type = type(error).__name__
            detail = str(error)
        else:
            error_type = "Message"
            detail = str(error)

        self._events.append(DiagnosticEvent(provider, operation, error_type, detail))

        if isinstance(error, (NoResults, ProviderUnavailable)):
            self.logger.info(f"ℹ️ {provider}.{operation}: {error_type} {detail}")
        else:
            self.logger.warning(f"⚠️ {provider}.{operation} failed: {error_type} {detail}")

    def recent_events(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        events = list(self._events)
        if limit is not None:
            events = events[-limit:]
        return [
            {
                "provider": e.provider,
                "operation": e.operation,
                "error_type": e.error_type,
                "detail": e.detail,
                "timestamp": e.timestamp,
            }
            for e in events
        ]


@dataclass
class ResolverMetrics:
    """Production telemetry for the resolver"""
    total_queries: int = 0
    short_circuited: int = 0
    reverse_lookups: int = 0
    reverse_fallbacks: int = 0
    nearby_lookups: int = 0
    synthetic_nearby: int = 0

    provider_success: Dict[str, int] = field(default_factory=dict)
    provider_failures: Dict[str, int] = field(default_factory=dict)

    branch_times_ms: List[float] = field(default_factory=list)
    start_time: float = field(default_factory=time.time)

    def record_query(self, short_circuited: bool = False):
        """Record query attempt"""
        self.total_queries += 1
        if short_circuited:
            self.short_circuited += 1

    def record_success(self, provider: str, latency_ms: float):
        self.provider_success[provider] = self.provider_success.get(provider, 0) + 1
        self.branch_times_ms.append(latency_ms)

    def record_failure(self, provider: str):
        self.provider_failures[provider] = self.provider_failures.get(provider, 0) + 1

    def get_summary(self) -> Dict[str, Any]:
        """Generate metrics summary for monitoring"""
        times = sorted(self.branch_times_ms)
        return {
            'total_queries': self.total_queries,
            'short_circuited': self.short_circuited,
            'reverse_lookups': self.reverse_lookups,
            'reverse_fallbacks': self.reverse_fallbacks,
            'nearby_lookups': self.nearby_lookups,
            'synthetic_nearby': self.synthetic_nearby,
            'provider_success': dict(self.provider_success),
            'provider_failures': dict(self.provider_failures),
            'avg_branch_latency_ms': sum(times) / len(times) if times else 0,
            'p95_branch_latency_ms': times[int(len(times) * 0.95)] if times else 0,
            'uptime_hours': (time.time() - self.start_time) / 3600
        }
