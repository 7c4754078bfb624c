"""Asyncio TCP transport"""

import asyncio
import contextlib
import logging
import sys
import typing

from hat import aio
from hat import util


mlog: logging.Logger = logging.getLogger(__name__)
"""Module logger"""


class Address(typing.NamedTuple):
    host: str
    port: int


class ConnectionInfo(typing.NamedTuple):
    name: str | None
    local_addr: Address
    remote_addr: Address


ConnectionCb: typing.TypeAlias = aio.AsyncCallable[['Connection'], None]
"""Connection callback"""


async def connect(addr: Address,
                  *,
                  name: str | None = None,
                  input_buffer_limit: int = 64 * 1024,
                  **kwargs
                  ) -> 'Connection':
    """Create TCP connection

    Argument `name` is included in connection info and log metadata.

    Argument `input_buffer_limit` is used as `asyncio.StreamReader` limit.
    Data receiving is paused while input buffer holds more than twice
    `input_buffer_limit` bytes and resumed once it is read.

    Additional arguments are passed directly to `asyncio.open_connection`.

    """
    reader, writer = await asyncio.open_connection(addr.host, addr.port,
                                                   limit=input_buffer_limit,
                                                   **kwargs)
    return Connection(reader, writer, name)


async def listen(connection_cb: ConnectionCb,
                 addr: Address,
                 *,
                 name: str | None = None,
                 bind_connections: bool = False,
                 input_buffer_limit: int = 64 * 1024,
                 **kwargs
                 ) -> 'Server':
    """Create listening server

    If `bind_connections` is ``True``, closing server will close all open
    incoming connections.

    Argument `input_buffer_limit` is associated with newly created connections
    (see `connect`).

    Additional arguments are passed directly to `asyncio.start_server`.

    """
    server = Server()
    server._connection_cb = connection_cb
    server._name = name
    server._bind_connections = bind_connections
    server._async_group = aio.Group()

    server._srv = await asyncio.start_server(server._on_connection,
                                             addr.host, addr.port,
                                             limit=input_buffer_limit,
                                             **kwargs)
    server.async_group.spawn(aio.call_on_cancel, server._on_close)

    try:
        socknames = (socket.getsockname() for socket in server._srv.sockets)
        server._addresses = [Address(*sockname[:2]) for sockname in socknames]

    except Exception:
        await aio.uncancellable(server.async_close())
        raise

    return server


class Server(aio.Resource):
    """TCP listening server

    Closing server will cancel all running `connection_cb` coroutines.

    """

    @property
    def async_group(self) -> aio.Group:
        """Async group"""
        return self._async_group

    @property
    def addresses(self) -> list[Address]:
        """Listening addresses"""
        return self._addresses

    async def _on_close(self):
        self._srv.close()

        if self._bind_connections or sys.version_info[:2] < (3, 12):
            await self._srv.wait_closed()

    def _on_connection(self, reader, writer):
        conn = Connection(reader, writer, self._name)

        try:
            self.async_group.spawn(self._run_connection_cb, conn)

        except Exception:
            conn.close()
            raise

    async def _run_connection_cb(self, conn):
        try:
            await aio.call(self._connection_cb, conn)

            if self._bind_connections:
                await conn.wait_closing()

            else:
                conn = None

        except Exception as e:
            mlog.warning('connection callback error: %s', e, exc_info=e)

        finally:
            if conn:
                await aio.uncancellable(conn.async_close())


class Connection(aio.Resource):
    """TCP connection"""

    def __init__(self,
                 reader: asyncio.StreamReader,
                 writer: asyncio.StreamWriter,
                 name: str | None):
        self._reader = reader
        self._writer = writer
        self._async_group = aio.Group()

        sockname = writer.get_extra_info('sockname')
        peername = writer.get_extra_info('peername')
        self._info = ConnectionInfo(
            name=name,
            local_addr=Address(sockname[0], sockname[1]),
            remote_addr=Address(peername[0], peername[1]))

        self.async_group.spawn(aio.call_on_cancel, self._on_close)

    @property
    def async_group(self) -> aio.Group:
        """Async group"""
        return self._async_group

    @property
    def info(self) -> ConnectionInfo:
        """Connection info"""
        return self._info

    async def write(self, data: util.Bytes):
        """Write data

        Data is added to output buffer without waiting for it to be
        transmitted (see `drain`).

        """
        if not self.is_open or self._writer.is_closing():
            raise ConnectionError()

        self._writer.write(data)

    async def drain(self):
        """Drain output buffer"""
        try:
            await self._writer.drain()

        except ConnectionError:
            self.close()
            raise

    async def read(self, n: int = -1) -> util.Bytes:
        """Read up to `n` bytes

        If `n` is ``-1``, data is read until EOF. If EOF is detected and no
        new bytes are available, `ConnectionError` is raised and connection
        is closed.

        Packets are not decoded by this package, reading is intended for
        peers receiving raw frames (e.g. tests and brokers built on top).

        """
        if n == 0:
            return b''

        data = await self._reader.read(n)
        if not data:
            self.close()
            raise ConnectionError()

        return data

    async def readexactly(self, n: int) -> util.Bytes:
        """Read exactly `n` bytes

        If exact number of bytes could not be read, `ConnectionError` is
        raised and connection is closed.

        Packets are not decoded by this package, reading is intended for
        peers receiving raw frames (e.g. tests and brokers built on top).

        """
        try:
            return await self._reader.readexactly(n)

        except asyncio.IncompleteReadError as e:
            self.close()
            raise ConnectionError() from e

    async def _on_close(self):
        self._writer.close()

        with contextlib.suppress(ConnectionError):
            await self._writer.wait_closed()
