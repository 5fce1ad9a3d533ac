"""Models for host metrics snapshots"""
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class DiskDevice(BaseModel):
    """
    Usage and I/O counters for one mounted partition.
    The I/O fields stay None when no I/O counter matched the device.
    """
    model_config = ConfigDict(frozen=True)

    device: str
    mountpoint: str
    filesystem: str
    usage_percent: float = 0.0
    used_bytes: int = Field(default=0, ge=0)
    total_bytes: int = Field(default=0, ge=0)
    available_bytes: int = Field(default=0, ge=0)
    read_bytes: int | None = Field(default=None, ge=0)
    write_bytes: int | None = Field(default=None, ge=0)
    read_ops: int | None = Field(default=None, ge=0)
    write_ops: int | None = Field(default=None, ge=0)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "device": self.device,
            "mountpoint": self.mountpoint,
            "filesystem": self.filesystem,
            "usage_percent": self.usage_percent,
            "used_bytes": self.used_bytes,
            "total_bytes": self.total_bytes,
            "available_bytes": self.available_bytes,
        }
        if self.read_bytes:
            payload["read_bytes"] = self.read_bytes
        if self.write_bytes:
            payload["write_bytes"] = self.write_bytes
        if self.read_ops:
            payload["read_ops"] = self.read_ops
        if self.write_ops:
            payload["write_ops"] = self.write_ops
        return payload


class MetricsSnapshot(BaseModel):
    """
    One point-in-time read of host state. Doubles as the server
    registration record through its identity fields.
    """
    model_config = ConfigDict(frozen=True)

    # Identity
    server_name: str = Field(min_length=1)
    hostname: str = Field(min_length=1)
    ip_address: str = ""
    operating_system: str = Field(min_length=1)
    architecture: str = Field(min_length=1)
    tags: dict[str, str] = Field(default_factory=dict)
    timestamp: datetime

    # CPU
    cpu_usage_percent: float = 0.0
    cpu_load_1m: float = Field(default=0.0, ge=0)
    cpu_load_5m: float = Field(default=0.0, ge=0)
    cpu_load_15m: float = Field(default=0.0, ge=0)

    # Memory
    memory_usage_percent: float = 0.0
    memory_used_bytes: int = Field(default=0, ge=0)
    memory_total_bytes: int = Field(default=0, ge=0)
    memory_available_bytes: int = Field(default=0, ge=0)
    swap_used_bytes: int = Field(default=0, ge=0)
    swap_total_bytes: int = Field(default=0, ge=0)

    # Root filesystem and aggregate disk I/O
    disk_usage_percent: float = 0.0
    disk_used_bytes: int = Field(default=0, ge=0)
    disk_total_bytes: int = Field(default=0, ge=0)
    disk_available_bytes: int = Field(default=0, ge=0)
    disk_read_bytes: int = Field(default=0, ge=0)
    disk_write_bytes: int = Field(default=0, ge=0)
    disk_read_ops: int = Field(default=0, ge=0)
    disk_write_ops: int = Field(default=0, ge=0)
    disk_io_time: int = Field(default=0, ge=0)

    # Network, all interfaces combined
    network_rx_bytes: int = Field(default=0, ge=0)
    network_tx_bytes: int = Field(default=0, ge=0)
    network_rx_packets: int = Field(default=0, ge=0)
    network_tx_packets: int = Field(default=0, ge=0)
    network_rx_errors: int = Field(default=0, ge=0)
    network_tx_errors: int = Field(default=0, ge=0)

    disk_devices: tuple[DiskDevice, ...] = ()

    @property
    def timestamp_rfc3339(self) -> str:
        ts = self.timestamp
        if ts.tzinfo is not None:
            ts = ts.astimezone(UTC)
        return ts.strftime(TIMESTAMP_FORMAT)

    def to_payload(self) -> dict[str, Any]:
        """
        Builds the ingest request body. Optional fields (ip_address,
        tags, disk_devices) are left out when empty.
        """
        payload: dict[str, Any] = {
            "server_name": self.server_name,
            "hostname": self.hostname,
        }
        if self.ip_address:
            payload["ip_address"] = self.ip_address
        payload["operating_system"] = self.operating_system
        payload["architecture"] = self.architecture
        if self.tags:
            payload["tags"] = dict(self.tags)

        payload.update({
            "timestamp": self.timestamp_rfc3339,
            "cpu_usage_percent": self.cpu_usage_percent,
            "cpu_load_1m": self.cpu_load_1m,
            "cpu_load_5m": self.cpu_load_5m,
            "cpu_load_15m": self.cpu_load_15m,
            "memory_usage_percent": self.memory_usage_percent,
            "memory_used_bytes": self.memory_used_bytes,
            "memory_total_bytes": self.memory_total_bytes,
            "memory_available_bytes": self.memory_available_bytes,
            "swap_used_bytes": self.swap_used_bytes,
            "swap_total_bytes": self.swap_total_bytes,
            "disk_usage_percent": self.disk_usage_percent,
            "disk_used_bytes": self.disk_used_bytes,
            "disk_total_bytes": self.disk_total_bytes,
            "disk_available_bytes": self.disk_available_bytes,
            "disk_read_bytes": self.disk_read_bytes,
            "disk_write_bytes": self.disk_write_bytes,
            "disk_read_ops": self.disk_read_ops,
            "disk_write_ops": self.disk_write_ops,
            "disk_io_time": self.disk_io_time,
            "network_rx_bytes": self.network_rx_bytes,
            "network_tx_bytes": self.network_tx_bytes,
            "network_rx_packets": self.network_rx_packets,
            "network_tx_packets": self.network_tx_packets,
            "network_rx_errors": self.network_rx_errors,
            "network_tx_errors": self.network_tx_errors,
        })

        if self.disk_devices:
            payload["disk_devices"] = [d.to_payload() for d in self.disk_devices]
        return payload
