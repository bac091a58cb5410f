"""
Prometheus metrics module for TutorConnect.

Service operation timings come from the @measure_operation decorator;
notification delivery outcomes are recorded per channel by the
notification dispatcher. All metrics live on a custom registry.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "tutorconnect_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "tutorconnect_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "tutorconnect_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

notification_deliveries_total = Counter(
    "tutorconnect_notification_deliveries_total",
    "Notification delivery attempts by event type, channel and outcome",
    ["event_type", "channel", "status"],  # status: sent | skipped | failed
    registry=REGISTRY,
)

notification_dispatch_seconds = Histogram(
    "tutorconnect_notification_dispatch_seconds",
    "Time spent fanning out one notification event",
    ["event_type"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

booking_transitions_total = Counter(
    "tutorconnect_booking_transitions_total",
    "Booking status transitions by action",
    ["action", "to_status"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'BookingService')
            operation: Operation/method name (e.g., 'approve_booking')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    @staticmethod
    def record_notification_delivery(event_type: str, channel: str, status: str) -> None:
        """Count one (recipient, channel) delivery attempt."""
        notification_deliveries_total.labels(
            event_type=event_type, channel=channel, status=status
        ).inc()

    @staticmethod
    def observe_notification_dispatch(event_type: str, duration: float) -> None:
        notification_dispatch_seconds.labels(event_type=event_type).observe(max(duration, 0.0))

    @staticmethod
    def inc_booking_transition(action: str, to_status: str) -> None:
        booking_transitions_total.labels(action=action, to_status=to_status).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """Generate Prometheus metrics in exposition format."""
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        """Get the content type for Prometheus metrics."""
        return cast(str, CONTENT_TYPE_LATEST)


# Singleton instance
prometheus_metrics = PrometheusMetrics()
