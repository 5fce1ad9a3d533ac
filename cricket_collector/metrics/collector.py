"""
Host metrics collector for the Cricket collector.
Collects CPU, memory, disk and network metrics into a MetricsSnapshot.
"""

import logging
from datetime import UTC, datetime
from typing import Any

import psutil

from cricket_collector.agent import identity
from cricket_collector.config import Settings
from cricket_collector.metrics.models import DiskDevice, MetricsSnapshot

logger = logging.getLogger(__name__)

# Utilization is measured over this window; it is the one blocking step of
# every collection cycle.
CPU_SAMPLE_SECONDS = 1.0

# Virtual and pseudo filesystems never reported as disk devices
EXCLUDED_FILESYSTEMS = frozenset({
    "tmpfs",
    "devtmpfs",
    "sysfs",
    "proc",
    "devpts",
    "securityfs",
    "cgroup",
    "cgroup2",
    "overlay",
})

DEVICE_PREFIX = "/dev/"

GIB = 1024 ** 3


def device_short_name(device: str) -> str:
    """Strips the /dev/ prefix: "/dev/sda1" -> "sda1"."""
    if device.startswith(DEVICE_PREFIX):
        return device[len(DEVICE_PREFIX):]
    return device


def match_io_counters(device: str, io_counters: dict[str, Any]):
    """
    Finds the I/O counters for a partition's device path.

    The exact short name is tried first, then the name with trailing
    digits removed so "sda1" falls back to its parent disk "sda".
    NVMe style names ("nvme0n1p1") only reduce to "nvme0n1p" and
    therefore match exactly or not at all.

    Returns:
        The matching counters entry, or None.
    """
    name = device_short_name(device)
    for candidate in (name, name.rstrip("0123456789")):
        if candidate in io_counters:
            return io_counters[candidate]
    return None


class MetricsCollector:
    def __init__(self, settings: Settings, cpu_interval: float = CPU_SAMPLE_SECONDS):
        """
        Initialize the metrics collector.

        Args:
            settings: Resolved collector settings
            cpu_interval: CPU utilization measurement window in seconds
        """
        self.settings = settings
        self.cpu_interval = cpu_interval

    def collect_identity(self) -> dict[str, Any]:
        """Collect server registration fields"""
        return {
            "server_name": self.settings.server_name,
            "hostname": identity.get_hostname(),
            "ip_address": identity.get_ip_address(),
            "operating_system": identity.get_operating_system(),
            "architecture": identity.get_architecture(),
            "tags": identity.get_tags(),
        }

    def collect_cpu_metrics(self) -> dict[str, Any]:
        """Collect CPU utilization (blocks for cpu_interval seconds)"""
        return {
            "cpu_usage_percent": float(psutil.cpu_percent(interval=self.cpu_interval)),
        }

    def collect_load_metrics(self) -> dict[str, Any]:
        load_1m, load_5m, load_15m = psutil.getloadavg()
        return {
            "cpu_load_1m": float(load_1m),
            "cpu_load_5m": float(load_5m),
            "cpu_load_15m": float(load_15m),
        }

    def collect_memory_metrics(self) -> dict[str, Any]:
        mem = psutil.virtual_memory()
        return {
            "memory_usage_percent": float(mem.percent),
            "memory_used_bytes": int(mem.used),
            "memory_total_bytes": int(mem.total),
            "memory_available_bytes": int(mem.available),
        }

    def collect_swap_metrics(self) -> dict[str, Any]:
        swap = psutil.swap_memory()
        return {
            "swap_used_bytes": int(swap.used),
            "swap_total_bytes": int(swap.total),
        }

    def collect_root_disk_metrics(self) -> dict[str, Any]:
        disk = psutil.disk_usage("/")
        return {
            "disk_usage_percent": float(disk.percent),
            "disk_used_bytes": int(disk.used),
            "disk_total_bytes": int(disk.total),
            "disk_available_bytes": int(disk.free),
        }

    def read_io_counters(self) -> dict[str, Any]:
        """Per-device I/O counters keyed by short device name"""
        return psutil.disk_io_counters(perdisk=True) or {}

    def collect_disk_devices(self, io_counters: dict[str, Any]) -> list[DiskDevice]:
        """
        Enumerate physical partitions and attach their I/O counters.
        Partitions whose usage cannot be read are skipped.
        """
        partitions = psutil.disk_partitions(all=False)
        logger.debug(f"Found {len(partitions)} partitions")

        devices: list[DiskDevice] = []
        for partition in partitions:
            if partition.fstype in EXCLUDED_FILESYSTEMS:
                continue

            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except Exception as e:
                logger.debug(f"Skipping {partition.mountpoint}: {e}")
                continue

            fields: dict[str, Any] = {
                "device": partition.device,
                "mountpoint": partition.mountpoint,
                "filesystem": partition.fstype,
                "usage_percent": float(usage.percent),
                "used_bytes": int(usage.used),
                "total_bytes": int(usage.total),
                "available_bytes": int(usage.free),
            }

            io = match_io_counters(partition.device, io_counters)
            if io is not None:
                fields.update({
                    "read_bytes": int(io.read_bytes),
                    "write_bytes": int(io.write_bytes),
                    "read_ops": int(io.read_count),
                    "write_ops": int(io.write_count),
                })

            device = DiskDevice(**fields)
            devices.append(device)
            logger.debug(
                f"Added disk: {device.device} ({device.filesystem}) -> "
                f"{device.mountpoint}, {device.usage_percent:.1f}% used"
            )

        logger.debug(f"Collected {len(devices)} disk devices")
        return devices

    def collect_disk_io_metrics(self, io_counters: dict[str, Any]) -> dict[str, Any]:
        """
        Sum I/O counters over every device reported, whether or not it was
        matched to a partition.
        """
        totals = {
            "disk_read_bytes": 0,
            "disk_write_bytes": 0,
            "disk_read_ops": 0,
            "disk_write_ops": 0,
            "disk_io_time": 0,
        }
        for io in io_counters.values():
            totals["disk_read_bytes"] += int(io.read_bytes)
            totals["disk_write_bytes"] += int(io.write_bytes)
            totals["disk_read_ops"] += int(io.read_count)
            totals["disk_write_ops"] += int(io.write_count)
            # busy_time is only reported on Linux and FreeBSD
            totals["disk_io_time"] += int(getattr(io, "busy_time", 0))
        return totals

    def collect_network_metrics(self) -> dict[str, Any]:
        """Collect counters for all interfaces combined"""
        net = psutil.net_io_counters(pernic=False)
        if net is None:
            return {}
        return {
            "network_rx_bytes": int(net.bytes_recv),
            "network_tx_bytes": int(net.bytes_sent),
            "network_rx_packets": int(net.packets_recv),
            "network_tx_packets": int(net.packets_sent),
            "network_rx_errors": int(net.errin),
            "network_tx_errors": int(net.errout),
        }

    def _collect_group(self, name: str, func, *args) -> Any:
        try:
            return func(*args)
        except Exception as e:
            logger.debug(f"Error collecting {name} metrics: {e}")
            return None

    def collect(self) -> MetricsSnapshot:
        """
        Collect a full snapshot. A failing metric group leaves its fields
        at zero; identity and timestamp are always present.
        """
        fields: dict[str, Any] = self.collect_identity()
        fields["timestamp"] = datetime.now(UTC).replace(microsecond=0)

        for name, func in (
            ("cpu", self.collect_cpu_metrics),
            ("load", self.collect_load_metrics),
            ("memory", self.collect_memory_metrics),
            ("swap", self.collect_swap_metrics),
            ("disk", self.collect_root_disk_metrics),
        ):
            fields.update(self._collect_group(name, func) or {})

        # Read once; shared by the per-device and aggregate steps
        io_counters = self._collect_group("disk I/O counter", self.read_io_counters) or {}

        devices = self._collect_group("disk device", self.collect_disk_devices, io_counters)
        fields["disk_devices"] = tuple(devices or ())
        fields.update(
            self._collect_group("disk I/O aggregate", self.collect_disk_io_metrics, io_counters) or {}
        )
        fields.update(self._collect_group("network", self.collect_network_metrics) or {})

        snapshot = MetricsSnapshot(**fields)
        self._log_snapshot(snapshot)
        return snapshot

    def _log_snapshot(self, snapshot: MetricsSnapshot):
        if not logger.isEnabledFor(logging.DEBUG):
            return
        logger.debug(
            f"Collected metrics: CPU={snapshot.cpu_usage_percent:.2f}%, "
            f"Memory={snapshot.memory_usage_percent:.2f}%, "
            f"Disk={snapshot.disk_usage_percent:.2f}%"
        )
        logger.debug(
            f"Memory details: Used={snapshot.memory_used_bytes} bytes "
            f"({snapshot.memory_used_bytes / GIB:.1f} GB), "
            f"Total={snapshot.memory_total_bytes} bytes "
            f"({snapshot.memory_total_bytes / GIB:.1f} GB), "
            f"Available={snapshot.memory_available_bytes} bytes "
            f"({snapshot.memory_available_bytes / GIB:.1f} GB)"
        )
        logger.debug(
            f"Swap details: Used={snapshot.swap_used_bytes} bytes "
            f"({snapshot.swap_used_bytes / GIB:.1f} GB), "
            f"Total={snapshot.swap_total_bytes} bytes "
            f"({snapshot.swap_total_bytes / GIB:.1f} GB)"
        )
