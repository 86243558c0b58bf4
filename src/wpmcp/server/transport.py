"""
STDIO Transport — newline-delimited JSON-RPC over stdin/stdout

Reads from stdin, writes to stdout.
NEVER pollutes stdout with logs.
"""

import sys
import json
import asyncio
from typing import Optional, Dict, Any, BinaryIO

from wpmcp.server.logger import get_logger
from wpmcp.server.protocol import ProtocolError, PARSE_ERROR

log = get_logger("transport")


class StdioTransport:
    """STDIO transport: one JSON message per line."""

    def __init__(self, reader: Optional[asyncio.StreamReader] = None, writer: Optional[BinaryIO] = None):
        self.running = False
        self._reader = reader
        self._stdout = writer

    async def start(self):
        """Initialize async stdin reader and direct stdout writer."""
        if self._reader is None:
            loop = asyncio.get_running_loop()
            self._reader = asyncio.StreamReader(limit=2**20)
            protocol = asyncio.StreamReaderProtocol(self._reader)
            await loop.connect_read_pipe(lambda: protocol, sys.stdin.buffer)

        if self._stdout is None:
            self._stdout = sys.stdout.buffer
        self.running = True
        log.info("Transport initialized")

    async def read_message(self) -> Optional[Dict[str, Any]]:
        """
        Read one JSON-RPC message from stdin.
        Returns the parsed message, None on EOF.
        Raises ProtocolError(PARSE_ERROR) for a line that is not UTF-8 JSON
        or is longer than the reader's limit; the next line is still readable.
        """
        if not self._reader:
            raise RuntimeError("Transport not started")

        while True:
            raw_bytes = await self._readline()
            if not raw_bytes:
                return None
            if raw_bytes.strip():
                break

        try:
            return json.loads(raw_bytes)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            log.error(f"JSON parse error: {exc}")
            raise ProtocolError(PARSE_ERROR, f"Parse error: {exc}")

    async def _readline(self) -> bytes:
        try:
            return await self._reader.readuntil(b"\n")
        except asyncio.IncompleteReadError as exc:
            return exc.partial
        except asyncio.LimitOverrunError as exc:
            await self._discard_line(exc.consumed)
            log.error("Message exceeds line limit; discarded")
            raise ProtocolError(PARSE_ERROR, "Parse error: message exceeds line limit")

    async def _discard_line(self, consumed: int):
        """Drop the rest of an oversized line, up to and including its newline."""
        while True:
            await self._reader.readexactly(consumed)
            try:
                await self._reader.readuntil(b"\n")
                return
            except asyncio.IncompleteReadError:
                return
            except asyncio.LimitOverrunError as exc:
                consumed = exc.consumed

    async def write_message(self, message: Dict[str, Any]):
        """Write a JSON-RPC message to stdout."""
        if self._stdout is None:
            raise RuntimeError("Transport not started")

        raw_text = json.dumps(message, separators=(",", ":")) + "\n"
        self._stdout.write(raw_text.encode("utf-8"))
        self._stdout.flush()

    async def close(self):
        self.running = False
        log.info("Transport closed")
