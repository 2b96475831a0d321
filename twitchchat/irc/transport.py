"""Line transport for the chat session.

``Transport`` is the contract the session relies on; ``StreamTransport`` is
the plain TCP implementation on top of asyncio streams.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

from ..constants import IRC_CONNECT_TIMEOUT, IRC_ENCODING, IRC_LINE_TERMINATOR
from ..errors import NetworkError
from ..logs.logger import logger


class Transport(ABC):
    """Blocking-style line I/O over one connection.

    All operations raise on I/O failure. End of stream is not an error:
    ``read_line`` returns ``None``.
    """

    @property
    @abstractmethod
    def is_open(self) -> bool: ...

    @abstractmethod
    async def open(self, host: str, port: int) -> None: ...

    @abstractmethod
    async def read_line(self) -> str | None: ...

    @abstractmethod
    async def write_line(self, text: str) -> None: ...

    @abstractmethod
    async def flush(self) -> None: ...

    @abstractmethod
    async def close(self) -> None: ...


class StreamTransport(Transport):
    def __init__(self, connect_timeout: float = IRC_CONNECT_TIMEOUT) -> None:
        self.connect_timeout = connect_timeout
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None

    @property
    def is_open(self) -> bool:
        return self.writer is not None and not self.writer.is_closing()

    async def open(self, host: str, port: int) -> None:
        if self.writer is not None:
            raise NetworkError("transport already open", data={"server": host})
        logger.log_event(
            "transport",
            "open",
            level=logging.DEBUG,
            server=host,
            port=port,
            timeout=self.connect_timeout,
        )
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=self.connect_timeout,
            )
        except TimeoutError as e:
            raise NetworkError(
                f"timed out connecting to {host}:{port}",
                data={"server": host, "port": port, "timeout": self.connect_timeout},
            ) from e
        except OSError as e:
            raise NetworkError(
                f"cannot connect to {host}:{port}: {e}",
                data={"server": host, "port": port},
            ) from e
        logger.log_event("transport", "opened", level=logging.DEBUG)

    async def read_line(self) -> str | None:
        if self.reader is None:
            raise NetworkError("transport not open")
        try:
            data = await self.reader.readline()
        except OSError as e:
            raise NetworkError(f"read failed: {e}") from e
        if not data:
            return None
        return data.decode(IRC_ENCODING, errors="ignore").rstrip("\r\n")

    async def write_line(self, text: str) -> None:
        writer = self._require_writer()
        writer.write(f"{text}{IRC_LINE_TERMINATOR}".encode(IRC_ENCODING))

    async def flush(self) -> None:
        writer = self._require_writer()
        try:
            await writer.drain()
        except OSError as e:
            raise NetworkError(f"write failed: {e}") from e

    async def close(self) -> None:
        if self.writer is None:
            return
        try:
            self.writer.close()
            await self.writer.wait_closed()
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "transport",
                "close_error",
                level=logging.WARNING,
                error=str(e),
                error_type=type(e).__name__,
            )
        finally:
            self.writer = None
            self.reader = None
        logger.log_event("transport", "closed", level=logging.DEBUG)

    def _require_writer(self) -> asyncio.StreamWriter:
        if self.writer is None or self.writer.is_closing():
            raise NetworkError("transport not open")
        return self.writer
