"""Notification delivery helpers for the infrastructure layer."""

from .channels import (
    ChannelUnavailableError,
    DeliveryChannel,
    InboxChannel,
    WebSocketChannel,
    serialize_inbox_notification,
)
from .dispatcher import Dispatcher
from .manager import ClientConnectionManager
from .permission import ClientPermissionPlatform, PermissionGate, PermissionPlatform

__all__ = [
    "ChannelUnavailableError",
    "ClientConnectionManager",
    "ClientPermissionPlatform",
    "DeliveryChannel",
    "Dispatcher",
    "InboxChannel",
    "PermissionGate",
    "PermissionPlatform",
    "WebSocketChannel",
    "serialize_inbox_notification",
]
