from cricket_collector.metrics.collector import MetricsCollector
from cricket_collector.metrics.models import DiskDevice, MetricsSnapshot

__all__ = ["DiskDevice", "MetricsCollector", "MetricsSnapshot"]
