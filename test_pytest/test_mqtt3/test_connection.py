import asyncio
import logging

import pytest

from hat import aio
from hat import util

from hat import mqtt3
from hat.mqtt3 import tcp


@pytest.fixture
def addr():
    return tcp.Address('127.0.0.1', util.get_unused_tcp_port())


async def test_connect_listen(addr):
    conn_queue = aio.Queue()
    srv = await mqtt3.listen(conn_queue.put_nowait, addr)
    assert srv.addresses == [addr]

    conn1 = await mqtt3.connect(addr)
    conn2 = await conn_queue.get()

    assert conn1.is_open
    assert conn2.is_open

    assert conn2.info.local_addr == addr
    assert conn1.info.remote_addr == conn2.info.local_addr
    assert conn1.info.local_addr == conn2.info.remote_addr

    await asyncio.gather(conn1.async_close(), conn2.async_close(),
                         srv.async_close())

    assert srv.is_closed
    assert conn1.is_closed
    assert conn2.is_closed


async def test_send(addr):
    packet = mqtt3.PublishPacket(duplicate=False,
                                 qos=mqtt3.QoS.AT_LEAST_ONCE,
                                 retain=False,
                                 topic_name='a/b',
                                 packet_identifier=10,
                                 payload=b'\xf1\xf2\xf3\xf4')
    data = b'\x32\x0b\x00\x03a/b\x00\x0a\xf1\xf2\xf3\xf4'

    conn_queue = aio.Queue()
    srv = await mqtt3.listen(conn_queue.put_nowait, addr)
    conn1 = await mqtt3.connect(addr)
    conn2 = await conn_queue.get()

    await conn1.send(packet)
    await conn1.drain()
    assert await conn2.conn.readexactly(len(data)) == data

    await conn2.send(packet)
    assert await conn1.conn.readexactly(len(data)) == data

    await conn1.async_close()
    await conn2.async_close()
    await srv.async_close()


async def test_send_many(addr):
    packets = [mqtt3.PingReqPacket(),
               mqtt3.PubAckPacket(packet_identifier=1),
               mqtt3.DisconnectPacket()]
    data = b'\xc0\x00\x40\x02\x00\x01\xe0\x00'

    conn_queue = aio.Queue()
    srv = await mqtt3.listen(conn_queue.put_nowait, addr)
    conn1 = await mqtt3.connect(addr)
    conn2 = await conn_queue.get()

    await conn1.send_many(packets)
    assert await conn2.conn.readexactly(len(data)) == data

    await conn1.async_close()
    await conn2.async_close()
    await srv.async_close()


async def test_encode_error_does_not_write(addr):
    conn_queue = aio.Queue()
    srv = await mqtt3.listen(conn_queue.put_nowait, addr)
    conn1 = await mqtt3.connect(addr, max_remaining_length=16)
    conn2 = await conn_queue.get()

    publish = mqtt3.PublishPacket(duplicate=False,
                                  qos=mqtt3.QoS.AT_MOST_ONCE,
                                  retain=False,
                                  topic_name='a',
                                  packet_identifier=None,
                                  payload=b'\x00' * 100)

    with pytest.raises(mqtt3.EncodeError) as e:
        await conn1.send(publish)
    assert e.value.error_type == mqtt3.ErrorType.PAYLOAD_TOO_LONG

    with pytest.raises(mqtt3.EncodeError) as e:
        await conn1.send_many([mqtt3.PingReqPacket(),
                               mqtt3.PubRecPacket(packet_identifier=1)])
    assert e.value.error_type == mqtt3.ErrorType.UNSUPPORTED_PACKET_TYPE

    await conn1.send(mqtt3.PingResPacket())
    assert await conn2.conn.readexactly(2) == b'\xd0\x00'

    assert conn1.is_open

    await conn1.async_close()
    await conn2.async_close()
    await srv.async_close()


async def test_send_closed(addr):
    conn_queue = aio.Queue()
    srv = await mqtt3.listen(conn_queue.put_nowait, addr)
    conn1 = await mqtt3.connect(addr)
    conn2 = await conn_queue.get()

    await conn1.async_close()

    with pytest.raises(ConnectionError):
        await conn1.send(mqtt3.PingReqPacket())

    with pytest.raises(ConnectionError):
        await conn2.conn.readexactly(1)

    await conn2.wait_closed()
    await srv.async_close()


async def test_concurrent_send(addr):
    packets = [mqtt3.PubAckPacket(packet_identifier=i) for i in range(100)]

    conn_queue = aio.Queue()
    srv = await mqtt3.listen(conn_queue.put_nowait, addr)
    conn1 = await mqtt3.connect(addr)
    conn2 = await conn_queue.get()

    await asyncio.gather(*(conn1.send(packet) for packet in packets))

    data = await conn2.conn.readexactly(4 * len(packets))
    identifiers = set()
    for i in range(len(packets)):
        frame = data[i*4:(i+1)*4]
        assert frame[:2] == b'\x40\x02'
        identifiers.add(int.from_bytes(frame[2:], 'big'))

    assert identifiers == set(range(100))

    await conn1.async_close()
    await conn2.async_close()
    await srv.async_close()


async def test_connection_cb_error(addr):
    srv = await mqtt3.listen(None, addr)
    conn = await mqtt3.connect(addr)

    with pytest.raises(ConnectionError):
        await conn.conn.readexactly(1)

    await conn.wait_closed()
    await srv.async_close()


async def test_communication_log(addr, caplog):
    caplog.set_level(logging.DEBUG, logger='hat.mqtt3.connection')

    conn_queue = aio.Queue()
    srv = await mqtt3.listen(conn_queue.put_nowait, addr)
    conn1 = await mqtt3.connect(addr, name='client')
    conn2 = await conn_queue.get()

    await conn1.send(mqtt3.PubAckPacket(packet_identifier=5))
    await conn2.conn.readexactly(4)

    await conn1.async_close()
    await conn2.async_close()
    await srv.async_close()

    records = [record for record in caplog.records
               if record.name == 'hat.mqtt3.connection' and
               record.meta['name'] == 'client']
    messages = [record.getMessage() for record in records]

    assert messages == ['open',
                        'send (PubAckPacket id=5)',
                        'close']
    assert all(record.meta['communication'] for record in records)
    assert all(record.meta['type'] == 'Mqtt3Connection'
               for record in records)


async def test_input_buffer_limit(addr):
    conn_queue = aio.Queue()
    srv = await mqtt3.listen(conn_queue.put_nowait, addr,
                             input_buffer_limit=16)
    conn1 = await mqtt3.connect(addr, input_buffer_limit=16)
    conn2 = await conn_queue.get()

    packet = mqtt3.PublishPacket(duplicate=False,
                                 qos=mqtt3.QoS.AT_MOST_ONCE,
                                 retain=False,
                                 topic_name='a',
                                 packet_identifier=None,
                                 payload=b'\x01' * 1000)
    data = mqtt3.encode_packet(packet)

    await conn1.send(packet)
    await conn2.send(packet)

    assert await conn2.conn.readexactly(len(data)) == data
    assert await conn1.conn.readexactly(len(data)) == data

    await conn1.async_close()
    await conn2.async_close()
    await srv.async_close()


async def test_read(addr):
    data = b'\xc0\x00\xd0\x00'

    conn_queue = aio.Queue()
    srv = await mqtt3.listen(conn_queue.put_nowait, addr)
    conn1 = await mqtt3.connect(addr)
    conn2 = await conn_queue.get()

    assert await conn2.conn.read(0) == b''

    await conn1.send_many([mqtt3.PingReqPacket(), mqtt3.PingResPacket()])

    received = b''
    while len(received) < len(data):
        received += await conn2.conn.read(len(data) - len(received))
    assert received == data

    await conn1.async_close()

    with pytest.raises(ConnectionError):
        await conn2.conn.read()

    await conn2.wait_closed()
    await srv.async_close()


async def test_communication_log_send_closed(addr, caplog):
    caplog.set_level(logging.DEBUG, logger='hat.mqtt3.connection')

    conn_queue = aio.Queue()
    srv = await mqtt3.listen(conn_queue.put_nowait, addr)
    conn1 = await mqtt3.connect(addr, name='client')
    conn2 = await conn_queue.get()

    await conn1.async_close()

    with pytest.raises(ConnectionError):
        await conn1.send(mqtt3.PingReqPacket())

    await conn2.async_close()
    await srv.async_close()

    messages = [record.getMessage() for record in caplog.records
                if record.name == 'hat.mqtt3.connection' and
                record.meta['name'] == 'client']

    assert messages == ['open', 'close']
