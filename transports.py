"""Transports that deliver a finished buffer to the printer.

Network and serial devices are python-escpos printers used only as raw byte
pipes; their blocking I/O runs in the default executor. Errors from the
device propagate unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Protocol
from urllib.parse import urlsplit

from escpos.printer import Network, Serial

import config

logger = logging.getLogger(__name__)

DEFAULT_PORT = 9100


class Transport(Protocol):
    async def execute(self, data: bytes) -> Any: ...

    async def is_printer_connected(self) -> bool: ...


class MockTransport:
    """Stub transport for testing without hardware."""

    def __init__(self) -> None:
        self.sent: List[bytes] = []

    async def execute(self, data: bytes) -> int:
        """Record the payload; returns the number of bytes 'sent'."""
        self.sent.append(bytes(data))
        logger.info("Printed (mock): %d bytes", len(data))
        return len(data)

    async def is_printer_connected(self) -> bool:
        """Return online status."""
        return True


class EscposTransport:
    """Raw byte pipe over a python-escpos device."""

    def __init__(self, device: Any) -> None:
        self.device = device

    async def execute(self, data: bytes) -> int:
        try:
            await asyncio.get_running_loop().run_in_executor(None, self.device._raw, bytes(data))
        except Exception as e:
            logger.error("Sending %d bytes failed: %s", len(data), e)
            raise
        logger.info("Sent %d bytes", len(data))
        return len(data)

    async def is_printer_connected(self) -> bool:
        return bool(
            await asyncio.get_running_loop().run_in_executor(None, self.device.is_online)
        )

    def close(self) -> None:
        self.device.close()


class NetworkTransport(EscposTransport):
    """Raw TCP (port 9100 by default)."""

    def __init__(self, host: str, port: int = DEFAULT_PORT, timeout: float = 60) -> None:
        self.host = host
        self.port = port
        super().__init__(Network(host=host, port=port, timeout=timeout))


class SerialTransport(EscposTransport):
    """Serial / UART connection."""

    def __init__(self, devfile: str, **options: Any) -> None:
        self.devfile = devfile
        super().__init__(Serial(devfile=devfile, **options))


def get_transport(interface: str, **options: Any) -> Transport:
    """Build a transport from an interface string.

    Accepted forms: ``mock``, ``tcp://host[:port]``, ``serial:/dev/ttyS0``
    and bare device paths (``/dev/...``, ``COMn``). ``options`` are passed
    to the underlying python-escpos device.

    Raises:
        ValueError: If the interface string is not recognized.
    """
    interface = interface.strip()
    if interface.lower() == "mock":
        return MockTransport()
    if interface.lower().startswith("tcp://"):
        parts = urlsplit(interface)
        if not parts.hostname:
            raise ValueError(f"Missing host in interface: {interface!r}")
        return NetworkTransport(parts.hostname, parts.port or DEFAULT_PORT, **options)
    if interface.lower().startswith("serial:"):
        return SerialTransport(interface[len("serial:"):], **options)
    if interface.startswith("/dev/") or interface.upper().startswith("COM"):
        return SerialTransport(interface, **options)
    raise ValueError(f"Unsupported printer interface: {interface!r}")


def transport_from_config() -> Transport:
    """Create the transport described by config.py / .env."""
    if config.MOCK_PRINTER:
        return MockTransport()
    interface = config.PRINTER_INTERFACE
    if interface.lower().startswith("tcp://"):
        return get_transport(interface, timeout=config.NETWORK_TIMEOUT)
    if interface.lower() == "mock":
        return get_transport(interface)
    return get_transport(
        interface,
        baudrate=config.BAUDRATE,
        bytesize=config.SERIAL_BYTESIZE,
        parity=config.SERIAL_PARITY,
        stopbits=config.SERIAL_STOPBITS,
        timeout=config.SERIAL_TIMEOUT,
        dsrdtr=config.SERIAL_DSRDTR,
    )
