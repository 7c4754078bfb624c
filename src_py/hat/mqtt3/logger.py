import collections
import logging

from hat.mqtt3 import common
from hat.mqtt3 import tcp


def create_logger(logger: logging.Logger,
                  info: tcp.ConnectionInfo
                  ) -> logging.LoggerAdapter:
    return _create_logger_adapter(logger, False, info)


class CommunicationLogger:

    def __init__(self,
                 logger: logging.Logger,
                 info: tcp.ConnectionInfo):
        self._log = _create_logger_adapter(logger, True, info)

    @property
    def is_enabled(self) -> bool:
        return self._log.isEnabledFor(logging.DEBUG)

    def log(self,
            action: common.CommLogAction,
            packet: common.Packet | None = None):
        if not self.is_enabled:
            return

        if packet is None:
            self._log.debug(action.value, stacklevel=2)

        else:
            self._log.debug('%s %s', action.value, _format_packet(packet),
                            stacklevel=2)


def _create_logger_adapter(logger, communication, info):
    extra = {'meta': {'type': 'Mqtt3Connection',
                      'communication': communication,
                      'name': info.name,
                      'local_addr': {'host': info.local_addr.host,
                                     'port': info.local_addr.port},
                      'remote_addr': {'host': info.remote_addr.host,
                                      'port': info.remote_addr.port}}}

    return logging.LoggerAdapter(logger, extra)


def _format_packet(packet):
    segments = collections.deque()
    segments.append(type(packet).__name__)

    if isinstance(packet, common.ConnectPacket):
        segments.append(f"protocol={packet.protocol.name}/"
                        f"{packet.protocol.level}")
        segments.append(f"client={packet.client_identifier!r}")
        segments.append(f"keep_alive={packet.keep_alive}")
        segments.append(f"clean_session={packet.clean_session}")

        if packet.last_will:
            segments.append(f"will_topic={packet.last_will.topic!r}")
            segments.append(f"will_qos={packet.last_will.qos.value}")

        if packet.user_name is not None:
            segments.append(f"user={packet.user_name!r}")

    elif isinstance(packet, common.ConnAckPacket):
        segments.append(f"session_present={packet.session_present}")
        segments.append(f"code={packet.return_code.name}")

    elif isinstance(packet, common.PublishPacket):
        segments.append(f"topic={packet.topic_name!r}")
        segments.append(f"qos={packet.qos.value}")

        if packet.packet_identifier is not None:
            segments.append(f"id={packet.packet_identifier}")

        if packet.duplicate:
            segments.append("dup")

        if packet.retain:
            segments.append("retain")

        segments.append(f"payload_size={len(packet.payload)}")

    elif isinstance(packet, common.SubscribePacket):
        segments.append(f"id={packet.packet_identifier}")
        segments.append(_format_segments(
            [f"{i.topic_filter!r}:{i.qos.value}"
             for i in packet.subscriptions]))

    elif isinstance(packet, common.SubAckPacket):
        segments.append(f"id={packet.packet_identifier}")
        segments.append(_format_segments(
            ['failure' if i.failure else str(i.qos.value)
             for i in packet.results]))

    elif isinstance(packet, common.UnsubscribePacket):
        segments.append(f"id={packet.packet_identifier}")
        segments.append(_format_segments(
            [repr(i) for i in packet.topic_filters]))

    elif isinstance(packet, (common.PubAckPacket,
                             common.PubRecPacket,
                             common.PubRelPacket,
                             common.PubCompPacket,
                             common.UnsubAckPacket)):
        segments.append(f"id={packet.packet_identifier}")

    elif isinstance(packet, (common.PingReqPacket,
                             common.PingResPacket,
                             common.DisconnectPacket)):
        pass

    else:
        raise TypeError('unsupported packet type')

    return _format_segments(segments)


def _format_segments(segments):
    if len(segments) == 1:
        return segments[0]

    return f"({' '.join(segments)})"
