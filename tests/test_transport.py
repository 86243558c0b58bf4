"""Tests for the stdio transport and the server's stdio loop."""

import asyncio
import io
import json

import pytest
from wpmcp.server.protocol import PARSE_ERROR, ProtocolError
from wpmcp.server.transport import StdioTransport


PING = b'{"jsonrpc":"2.0","id":2,"method":"ping"}'


def _reader(*lines):
    reader = asyncio.StreamReader()
    for line in lines:
        reader.feed_data(line.encode() + b"\n")
    reader.feed_eof()
    return reader


def _written(buf):
    return [json.loads(line) for line in buf.getvalue().decode().splitlines()]


class TestStdioTransport:
    async def test_read_skips_blank_lines(self):
        transport = StdioTransport(_reader("", "   ", '{"jsonrpc":"2.0","id":1,"method":"ping"}'), io.BytesIO())
        await transport.start()
        assert (await transport.read_message())["method"] == "ping"
        assert await transport.read_message() is None

    async def test_parse_error(self):
        transport = StdioTransport(_reader("{oops"), io.BytesIO())
        await transport.start()
        with pytest.raises(ProtocolError) as exc:
            await transport.read_message()
        assert exc.value.code == PARSE_ERROR

    async def test_invalid_utf8_is_parse_error(self):
        reader = asyncio.StreamReader()
        reader.feed_data(b'{"jsonrpc":"2.0","id":1,"method":"\xff"}\n' + PING + b"\n")
        reader.feed_eof()
        transport = StdioTransport(reader, io.BytesIO())
        await transport.start()
        with pytest.raises(ProtocolError) as exc:
            await transport.read_message()
        assert exc.value.code == PARSE_ERROR
        assert (await transport.read_message())["method"] == "ping"

    @pytest.mark.parametrize("tail", [b"\n" + PING + b"\n", b""])
    async def test_oversized_line_is_discarded(self, tail):
        reader = asyncio.StreamReader(limit=64)
        reader.feed_data(b'{"pad":"' + b"x" * 500 + b'"}' + tail)
        reader.feed_eof()
        transport = StdioTransport(reader, io.BytesIO())
        await transport.start()
        with pytest.raises(ProtocolError) as exc:
            await transport.read_message()
        assert exc.value.code == PARSE_ERROR
        if tail:
            assert (await transport.read_message())["method"] == "ping"
        assert await transport.read_message() is None

    async def test_write_is_one_compact_line(self):
        buf = io.BytesIO()
        transport = StdioTransport(_reader(), buf)
        await transport.start()
        await transport.write_message({"jsonrpc": "2.0", "id": 1, "result": {}})
        assert buf.getvalue() == b'{"jsonrpc":"2.0","id":1,"result":{}}\n'

    async def test_not_started(self):
        with pytest.raises(RuntimeError):
            await StdioTransport().read_message()


class TestServeStdio:
    async def test_session(self, server, backend, shop):
        backend.add("GET", "/wp-json/wp/v2/posts", [], headers={"X-WP-Total": "0"})
        lines = [
            json.dumps({"jsonrpc": "2.0", "id": 1, "method": "initialize",
                        "params": {"protocolVersion": "2024-11-05", "clientInfo": {"name": "test-client"}}}),
            json.dumps({"jsonrpc": "2.0", "method": "notifications/initialized"}),
            "not json",
            json.dumps({"jsonrpc": "2.0", "id": 2, "method": "tools/list"}),
            json.dumps({"jsonrpc": "2.0", "id": 3, "method": "tools/call",
                        "params": {"name": "list_posts", "arguments": {}}}),
            json.dumps({"jsonrpc": "2.0", "id": 4, "method": "tools/call",
                        "params": {"name": "nope", "arguments": {}}}),
        ]
        buf = io.BytesIO()
        await server.run(StdioTransport(_reader(*lines), buf))

        out = _written(buf)
        assert [m.get("id") for m in out] == [1, None, 2, 3, 4]
        assert out[0]["result"]["serverInfo"]["name"] == "wordpress-mcp-server"
        assert out[1]["error"]["code"] == PARSE_ERROR
        assert len(out[2]["result"]["tools"]) == 31
        assert json.loads(out[3]["result"]["content"][0]["text"])["status"] == "success"
        assert out[4]["result"]["isError"] is True

    async def test_bad_lines_do_not_stop_the_loop(self, server):
        reader = asyncio.StreamReader(limit=256)
        reader.feed_data(b'{"jsonrpc":"2.0","id":1,"method":"\xff"}\n')
        reader.feed_data(b'{"pad":"' + b"x" * 1000 + b'"}\n')
        reader.feed_data(PING + b"\n")
        reader.feed_eof()
        buf = io.BytesIO()
        await server.run(StdioTransport(reader, buf))

        out = _written(buf)
        assert [m.get("id") for m in out] == [None, None, 2]
        assert out[0]["error"]["code"] == PARSE_ERROR
        assert out[1]["error"]["code"] == PARSE_ERROR
        assert out[2]["result"] == {}
