"""MQTT 3.1/3.1.1 packet encoder"""

from hat import util

from hat.mqtt3 import common
from hat.mqtt3 import sink


def encode_packet(packet: common.Packet,
                  *,
                  max_remaining_length: int = common.MAX_REMAINING_LENGTH
                  ) -> util.Bytes:
    """Encode packet into bytes

    Packet is written to in-memory buffer and complete frame is returned
    only if encoding succeeds. Result can be written to transport without
    risk of leaving partial frame in case of encoding error.

    """
    buffer = sink.BytesSink()
    write_packet(buffer, packet, max_remaining_length=max_remaining_length)
    return buffer.data


def write_packet(output: sink.Sink,
                 packet: common.Packet,
                 *,
                 max_remaining_length: int = common.MAX_REMAINING_LENGTH):
    """Write packet to sink

    Data is written directly to `output`. If `common.EncodeError` is
    raised after some of the fields were written (e.g. remaining length
    exceeds `max_remaining_length` or string field is longer than
    `common.MAX_STRING_LENGTH` bytes), `output` is left with partial packet.
    For all-or-nothing semantics use `encode_packet`.

    Encoding of `common.PubRecPacket`, `common.PubCompPacket` and
    `common.UnsubscribePacket` is not supported and fails without writing
    any data.

    """
    if (max_remaining_length < 0 or
            max_remaining_length > common.MAX_VARIABLE_BYTE_INTEGER):
        raise ValueError('unsupported remaining length limit')

    if isinstance(packet, common.ConnectPacket):
        _write_connect_packet(output, packet, max_remaining_length)

    elif isinstance(packet, common.ConnAckPacket):
        _write_connack_packet(output, packet)

    elif isinstance(packet, common.PublishPacket):
        _write_publish_packet(output, packet, max_remaining_length)

    elif isinstance(packet, common.PubAckPacket):
        output.write(b'\x40\x02')
        output.write_u16(packet.packet_identifier)

    elif isinstance(packet, common.PubRecPacket):
        raise common.EncodeError(common.ErrorType.UNSUPPORTED_PACKET_TYPE,
                                 'PUBREC encoding not supported')

    elif isinstance(packet, common.PubRelPacket):
        output.write(b'\x62\x02')
        output.write_u16(packet.packet_identifier)

    elif isinstance(packet, common.PubCompPacket):
        raise common.EncodeError(common.ErrorType.UNSUPPORTED_PACKET_TYPE,
                                 'PUBCOMP encoding not supported')

    elif isinstance(packet, common.SubscribePacket):
        _write_subscribe_packet(output, packet, max_remaining_length)

    elif isinstance(packet, common.SubAckPacket):
        _write_suback_packet(output, packet, max_remaining_length)

    elif isinstance(packet, common.UnsubscribePacket):
        raise common.EncodeError(common.ErrorType.UNSUPPORTED_PACKET_TYPE,
                                 'UNSUBSCRIBE encoding not supported')

    elif isinstance(packet, common.UnsubAckPacket):
        output.write(b'\xb0\x02')
        output.write_u16(packet.packet_identifier)

    elif isinstance(packet, common.PingReqPacket):
        output.write(b'\xc0\x00')

    elif isinstance(packet, common.PingResPacket):
        output.write(b'\xd0\x00')

    elif isinstance(packet, common.DisconnectPacket):
        output.write(b'\xe0\x00')

    else:
        raise ValueError('unsupported packet type')


def write_remaining_length(output: sink.Sink,
                           value: int,
                           max_value: int = common.MAX_REMAINING_LENGTH):
    """Write remaining length as variable byte integer

    Value is encoded with 7 bits per byte, least significant group first,
    with continuation flag set on all bytes except the last one. If `value`
    is greater than `max_value`, `common.EncodeError` is raised and no data
    is written. Values that can not be encoded in 4 bytes raise
    `ValueError` regardless of `max_value`.

    """
    if value < 0 or max_value > common.MAX_VARIABLE_BYTE_INTEGER:
        raise ValueError('unsupported remaining length value')

    if value > max_value:
        raise common.EncodeError(
            common.ErrorType.PAYLOAD_TOO_LONG,
            f'remaining length {value} exceeds limit {max_value}')

    output.write(bytes(_encode_uintvar(value)))


def write_string(output: sink.Sink,
                 value: common.String | common.Binary):
    """Write length prefixed string

    String values are UTF-8 encoded, binary values are written as is.
    Data longer than `common.MAX_STRING_LENGTH` bytes raises
    `common.EncodeError` without writing any data.

    """
    value = _get_bytes(value)

    if len(value) > common.MAX_STRING_LENGTH:
        raise common.EncodeError(
            common.ErrorType.STRING_TOO_LONG,
            f'length {len(value)} exceeds {common.MAX_STRING_LENGTH} bytes')

    output.write_u16(len(value))
    output.write(value)


def _write_connect_packet(output, packet, max_remaining_length):
    protocol_name = _get_bytes(packet.protocol.name)
    client_identifier = _get_bytes(packet.client_identifier)
    will = packet.last_will

    remaining_len = 8 + len(protocol_name) + len(client_identifier)

    if will:
        will_topic = _get_bytes(will.topic)
        will_message = _get_bytes(will.message)
        remaining_len += 4 + len(will_topic) + len(will_message)

    if packet.user_name is not None:
        user_name = _get_bytes(packet.user_name)
        remaining_len += 2 + len(user_name)

    if packet.password is not None:
        password = _get_bytes(packet.password)
        remaining_len += 2 + len(password)

    output.write_u8(0x10)
    write_remaining_length(output, remaining_len, max_remaining_length)

    write_string(output, protocol_name)
    output.write_u8(packet.protocol.level)

    output.write_u8((0x02 if packet.clean_session else 0x00) |
                    (0x04 if will else 0x00) |
                    ((will.qos.value << 3) if will else 0x00) |
                    (0x20 if will and will.retain else 0x00) |
                    (0x40 if packet.password is not None else 0x00) |
                    (0x80 if packet.user_name is not None else 0x00))

    output.write_u16(packet.keep_alive)
    write_string(output, client_identifier)

    if will:
        write_string(output, will_topic)
        write_string(output, will_message)

    if packet.user_name is not None:
        write_string(output, user_name)

    if packet.password is not None:
        write_string(output, password)


def _write_connack_packet(output, packet):
    output.write(bytes([0x20,
                        0x02,
                        0x01 if packet.session_present else 0x00,
                        packet.return_code.value]))


def _write_publish_packet(output, packet, max_remaining_length):
    topic_name = _get_bytes(packet.topic_name)
    with_identifier = (packet.qos != common.QoS.AT_MOST_ONCE and
                       packet.packet_identifier is not None)

    remaining_len = (2 + len(topic_name) +
                     (2 if with_identifier else 0) +
                     len(packet.payload))

    output.write_u8(0x30 |
                    (0x08 if packet.duplicate else 0x00) |
                    (packet.qos.value << 1) |
                    (0x01 if packet.retain else 0x00))
    write_remaining_length(output, remaining_len, max_remaining_length)

    write_string(output, topic_name)

    if with_identifier:
        output.write_u16(packet.packet_identifier)

    output.write(packet.payload)


def _write_subscribe_packet(output, packet, max_remaining_length):
    subscriptions = [(_get_bytes(i.topic_filter), i.qos)
                     for i in packet.subscriptions]

    remaining_len = 2 + sum(2 + len(topic_filter) + 1
                            for topic_filter, _ in subscriptions)

    output.write_u8(0x82)
    write_remaining_length(output, remaining_len, max_remaining_length)

    output.write_u16(packet.packet_identifier)

    for topic_filter, qos in subscriptions:
        write_string(output, topic_filter)
        output.write_u8(qos.value)


def _write_suback_packet(output, packet, max_remaining_length):
    results = bytes((0x80 if result.failure else 0x00) | result.qos.value
                    for result in packet.results)

    output.write_u8(0x90)
    write_remaining_length(output, 2 + len(results), max_remaining_length)

    output.write_u16(packet.packet_identifier)
    output.write(results)


def _get_bytes(value):
    if isinstance(value, str):
        return value.encode()

    return value


def _encode_uintvar(value):
    if value < 0 or value > common.MAX_VARIABLE_BYTE_INTEGER:
        raise ValueError('unsupported variable byte integer value')

    while True:
        byte = value & 0x7f
        value = value >> 7

        if value:
            byte = byte | 0x80

        yield byte

        if not value:
            break
