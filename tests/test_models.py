"""Tests for the ingest payload shape."""

import json
from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from cricket_collector.metrics.models import DiskDevice, MetricsSnapshot

REQUIRED_KEYS = [
    "server_name", "hostname", "operating_system", "architecture", "timestamp",
    "cpu_usage_percent", "cpu_load_1m", "cpu_load_5m", "cpu_load_15m",
    "memory_usage_percent", "memory_used_bytes", "memory_total_bytes",
    "memory_available_bytes", "swap_used_bytes", "swap_total_bytes",
    "disk_usage_percent", "disk_used_bytes", "disk_total_bytes",
    "disk_available_bytes", "disk_read_bytes", "disk_write_bytes",
    "disk_read_ops", "disk_write_ops", "disk_io_time",
    "network_rx_bytes", "network_tx_bytes", "network_rx_packets",
    "network_tx_packets", "network_rx_errors", "network_tx_errors",
]


def make_snapshot(**overrides):
    fields = {
        "server_name": "web-01",
        "hostname": "web-01.local",
        "operating_system": "linux",
        "architecture": "amd64",
        "timestamp": datetime(2024, 5, 1, 12, 30, 45, tzinfo=UTC),
    }
    fields.update(overrides)
    return MetricsSnapshot(**fields)


class TestSnapshotPayload:
    def test_zero_snapshot_has_every_required_key(self):
        payload = make_snapshot().to_payload()
        assert sorted(payload) == sorted(REQUIRED_KEYS)
        assert all(payload[k] == 0 for k in REQUIRED_KEYS[5:])

    def test_optional_fields_omitted_when_empty(self):
        payload = make_snapshot(ip_address="", tags={}).to_payload()
        assert "ip_address" not in payload
        assert "tags" not in payload
        assert "disk_devices" not in payload

    def test_optional_fields_present_when_set(self):
        device = DiskDevice(device="/dev/sda1", mountpoint="/", filesystem="ext4")
        payload = make_snapshot(
            ip_address="10.0.0.5",
            tags={"collector": "cricket-python-collector", "version": "1.0.0"},
            disk_devices=(device,),
        ).to_payload()
        assert payload["ip_address"] == "10.0.0.5"
        assert payload["tags"]["version"] == "1.0.0"
        assert payload["disk_devices"] == [device.to_payload()]

    def test_timestamp_rfc3339_utc_seconds(self):
        local = timezone(timedelta(hours=2))
        snap = make_snapshot(timestamp=datetime(2024, 5, 1, 14, 30, 45, tzinfo=local))
        assert snap.to_payload()["timestamp"] == "2024-05-01T12:30:45Z"

    def test_payload_is_json_serializable(self):
        device = DiskDevice(
            device="/dev/sda1", mountpoint="/", filesystem="ext4",
            usage_percent=41.5, used_bytes=415, total_bytes=1000, available_bytes=585,
            read_bytes=1, write_bytes=2, read_ops=3, write_ops=4,
        )
        body = json.loads(json.dumps(make_snapshot(disk_devices=(device,)).to_payload()))
        assert body["disk_devices"][0]["write_ops"] == 4

    def test_snapshot_is_immutable(self):
        snap = make_snapshot()
        with pytest.raises(ValidationError):
            snap.cpu_usage_percent = 50.0

    def test_identity_fields_required(self):
        with pytest.raises(ValidationError):
            make_snapshot(hostname="")


class TestDiskDevicePayload:
    def test_io_fields_omitted_when_unmatched(self):
        payload = DiskDevice(device="/dev/sda1", mountpoint="/", filesystem="ext4").to_payload()
        assert set(payload) == {
            "device", "mountpoint", "filesystem", "usage_percent",
            "used_bytes", "total_bytes", "available_bytes",
        }

    def test_zero_io_fields_omitted(self):
        payload = DiskDevice(
            device="/dev/sdb1", mountpoint="/data", filesystem="xfs",
            read_bytes=0, write_bytes=512, read_ops=0, write_ops=1,
        ).to_payload()
        assert "read_bytes" not in payload
        assert "read_ops" not in payload
        assert payload["write_bytes"] == 512
        assert payload["write_ops"] == 1
