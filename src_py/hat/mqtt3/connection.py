"""MQTT 3.1/3.1.1 packet connection on top of TCP"""

from collections.abc import Iterable
import asyncio
import logging
import typing

from hat import aio

from hat.mqtt3 import common
from hat.mqtt3 import encoder
from hat.mqtt3 import logger
from hat.mqtt3 import tcp


mlog: logging.Logger = logging.getLogger(__name__)
"""Module logger"""

ConnectionCb: typing.TypeAlias = aio.AsyncCallable[['Connection'], None]
"""Connection callback"""


async def connect(addr: tcp.Address,
                  *,
                  max_remaining_length: int = common.MAX_REMAINING_LENGTH,
                  **kwargs
                  ) -> 'Connection':
    """Create new MQTT connection

    Additional arguments are passed directly to `hat.mqtt3.tcp.connect`.

    """
    conn = await tcp.connect(addr, **kwargs)

    return Connection(conn=conn,
                      max_remaining_length=max_remaining_length)


async def listen(connection_cb: ConnectionCb,
                 addr: tcp.Address = tcp.Address('0.0.0.0', 1883),
                 *,
                 max_remaining_length: int = common.MAX_REMAINING_LENGTH,
                 **kwargs
                 ) -> tcp.Server:
    """Create new MQTT listening server

    Additional arguments are passed directly to `hat.mqtt3.tcp.listen`.

    """

    async def on_connection(conn):
        await aio.call(connection_cb,
                       Connection(conn=conn,
                                  max_remaining_length=max_remaining_length))

    return await tcp.listen(on_connection, addr, **kwargs)


class Connection(aio.Resource):
    """MQTT connection

    Packets are encoded in memory and written to TCP connection only if
    encoding succeeds, so encoding errors never leave partial packets in
    output stream. Concurrent `send` calls are serialized.

    """

    def __init__(self,
                 conn: tcp.Connection,
                 max_remaining_length: int = common.MAX_REMAINING_LENGTH):
        self._conn = conn
        self._max_remaining_length = max_remaining_length
        self._send_lock = asyncio.Lock()
        self._log = logger.create_logger(mlog, conn.info)
        self._comm_log = logger.CommunicationLogger(mlog, conn.info)

        self.async_group.spawn(aio.call_on_cancel, self._comm_log.log,
                               common.CommLogAction.CLOSE)
        self._comm_log.log(common.CommLogAction.OPEN)

    @property
    def async_group(self) -> aio.Group:
        """Async group"""
        return self._conn.async_group

    @property
    def info(self) -> tcp.ConnectionInfo:
        """Connection info"""
        return self._conn.info

    @property
    def conn(self) -> tcp.Connection:
        """Underlying TCP connection"""
        return self._conn

    async def send(self, packet: common.Packet):
        """Send packet

        Raises `common.EncodeError` if packet can not be encoded and
        `ConnectionError` if connection is closed.

        """
        await self.send_many([packet])

    async def send_many(self, packets: Iterable[common.Packet]):
        """Send multiple packets

        All packets are encoded before any data is written. If any of them
        can not be encoded, none of them is sent.

        """
        packets = list(packets)
        data = bytearray()

        for packet in packets:
            try:
                data.extend(encoder.encode_packet(
                    packet,
                    max_remaining_length=self._max_remaining_length))

            except common.EncodeError as e:
                self._log.warning('packet encoding error: %s', e.description)
                raise

        async with self._send_lock:
            await self._conn.write(data)

            if self._comm_log.is_enabled:
                for packet in packets:
                    self._comm_log.log(common.CommLogAction.SEND, packet)

    async def drain(self):
        """Drain output buffer"""
        await self._conn.drain()
