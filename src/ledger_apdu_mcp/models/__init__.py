"""Result models for device queries."""

from .device import DashboardOnly, ResponseAppInfo, ResponseDeviceInfo, ResponseVersion
