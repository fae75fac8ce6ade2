"""Device transports.

:class:`SerialLink` wraps a pyserial port; anything with the same
``read_available`` / ``write`` / ``close`` methods can stand in for it.
"""

from .serial_link import SerialLink, available_ports, describe_ports, find_device_port

__all__ = ["SerialLink", "available_ports", "describe_ports", "find_device_port"]
