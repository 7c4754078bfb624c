import io
import socket

import pytest

from hat import mqtt3


class ListSink(mqtt3.Sink):

    def __init__(self):
        self.writes = []

    def write(self, data):
        self.writes.append(bytes(data))


class FailingSink(mqtt3.Sink):

    def write(self, data):
        raise ConnectionResetError()


@pytest.mark.parametrize("value, data", [
    (0, b'\x00'),
    (0x7f, b'\x7f'),
    (0xff, b'\xff'),
])
def test_write_u8(value, data):
    sink = mqtt3.BytesSink()
    sink.write_u8(value)
    assert sink.data == data


@pytest.mark.parametrize("value, data", [
    (0, b'\x00\x00'),
    (10, b'\x00\x0a'),
    (260, b'\x01\x04'),
    (0xffff, b'\xff\xff'),
])
def test_write_u16(value, data):
    sink = mqtt3.BytesSink()
    sink.write_u16(value)
    assert sink.data == data


@pytest.mark.parametrize("value", [-1, 0x100])
def test_write_u8_invalid(value):
    sink = mqtt3.BytesSink()

    with pytest.raises(ValueError):
        sink.write_u8(value)

    assert len(sink) == 0


@pytest.mark.parametrize("value", [-1, 0x10000])
def test_write_u16_invalid(value):
    sink = mqtt3.BytesSink()

    with pytest.raises(ValueError):
        sink.write_u16(value)

    assert len(sink) == 0


def test_abstract_sink():
    with pytest.raises(TypeError):
        mqtt3.Sink()

    sink = ListSink()
    sink.write(b'\x01\x02')
    sink.write_u8(3)
    sink.write_u16(0x0405)

    assert sink.writes == [b'\x01\x02', b'\x03', b'\x04\x05']


def test_bytes_sink():
    sink = mqtt3.BytesSink()
    assert len(sink) == 0
    assert sink.data == b''

    sink.write(b'abc')
    sink.write(bytearray(b'de'))
    sink.write(memoryview(b'f'))
    assert len(sink) == 6
    assert sink.data == b'abcdef'

    data = sink.data
    sink.write(b'g')
    assert data == b'abcdef'

    sink.clear()
    assert len(sink) == 0
    assert sink.data == b''


def test_stream_sink():
    stream = io.BytesIO()
    sink = mqtt3.StreamSink(stream)
    assert sink.stream is stream

    mqtt3.write_packet(sink, mqtt3.PingReqPacket())
    mqtt3.write_packet(sink, mqtt3.PubAckPacket(packet_identifier=1))
    sink.flush()

    assert stream.getvalue() == b'\xc0\x00\x40\x02\x00\x01'


def test_stream_sink_buffered_writer():
    raw = io.BytesIO()
    stream = io.BufferedWriter(raw)
    sink = mqtt3.StreamSink(stream)

    mqtt3.write_packet(sink, mqtt3.DisconnectPacket())
    sink.flush()

    assert raw.getvalue() == b'\xe0\x00'


def test_stream_sink_socket():
    packet = mqtt3.ConnAckPacket(
        session_present=True,
        return_code=mqtt3.ConnectReturnCode.ACCEPTED)

    sock1, sock2 = socket.socketpair()
    try:
        with sock1.makefile('wb') as stream:
            sink = mqtt3.StreamSink(stream)
            mqtt3.write_packet(sink, packet)
            sink.flush()

        data = b''
        while len(data) < 4:
            data += sock2.recv(4 - len(data))

        assert data == b'\x20\x02\x01\x00'

    finally:
        sock1.close()
        sock2.close()


def test_sink_error_propagation():
    sink = FailingSink()

    with pytest.raises(ConnectionResetError):
        mqtt3.write_packet(sink, mqtt3.PingReqPacket())


def test_stream_sink_closed_stream():
    stream = io.BytesIO()
    stream.close()
    sink = mqtt3.StreamSink(stream)

    with pytest.raises(ValueError):
        mqtt3.write_packet(sink, mqtt3.PingResPacket())
