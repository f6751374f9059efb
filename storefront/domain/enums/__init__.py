"""列挙型モジュール."""
from .device_type import DeviceType
from .identity_kind import IdentityKind

__all__ = [
    "DeviceType",
    "IdentityKind",
]
