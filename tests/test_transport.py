import asyncio
import io

import pytest

from counter_mcp.shared.errors import TransportFailure
from counter_mcp.transport import StreamTransport


def test_read_ahead_is_bounded():
    lines = "".join(f"line {i}\n" for i in range(100))

    async def scenario():
        transport = StreamTransport(io.StringIO(lines), io.StringIO(), read_ahead=3)
        first = await transport.receive()
        await asyncio.sleep(0.05)
        buffered = transport.buffered
        received = [first]
        while True:
            line = await transport.receive()
            if line is None:
                break
            received.append(line)
        return buffered, received

    buffered, received = asyncio.run(scenario())
    assert buffered <= 3
    assert received == [f"line {i}\n" for i in range(100)]


class _FailingReader(io.StringIO):
    def readline(self, *args):
        raise OSError("stdin gone")


def test_read_error_is_transport_failure():
    async def scenario():
        transport = StreamTransport(_FailingReader(), io.StringIO())
        with pytest.raises(TransportFailure):
            await transport.receive()

    asyncio.run(scenario())


def test_closed_transport():
    async def scenario():
        transport = StreamTransport(io.StringIO("x\n"), io.StringIO())
        transport.close()
        assert await transport.receive() is None
        with pytest.raises(TransportFailure):
            await transport.send("y\n")

    asyncio.run(scenario())


def test_read_ahead_must_be_positive():
    with pytest.raises(ValueError):
        StreamTransport(io.StringIO(), io.StringIO(), read_ahead=0)
