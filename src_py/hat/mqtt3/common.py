from collections.abc import Collection
import enum
import typing

from hat import util


MAX_REMAINING_LENGTH: int = 256 * 1024
"""Default remaining length limit"""

MAX_VARIABLE_BYTE_INTEGER: int = 0x0fff_ffff
"""Largest value representable with four byte remaining length encoding"""

MAX_STRING_LENGTH: int = 0xffff
"""Largest length of length prefixed string or binary data"""

UInt8: typing.TypeAlias = int
"""Single byte integer in range [0, 0xff]"""

UInt16: typing.TypeAlias = int
"""Two byte integer in range [0, 0xffff]"""

String: typing.TypeAlias = str
"""UTF-8 string limited to maximum of 0xffff bytes"""

Binary: typing.TypeAlias = util.Bytes
"""Binary data limited to maximum of 0xffff bytes"""

PacketIdentifier: typing.TypeAlias = UInt16
"""Packet identifier"""


class QoS(enum.Enum):
    AT_MOST_ONCE = 0
    AT_LEAST_ONCE = 1
    EXACTLY_ONCE = 2


class ConnectReturnCode(enum.Enum):
    ACCEPTED = 0
    REFUSED_PROTOCOL_VERSION = 1
    REFUSED_IDENTIFIER_REJECTED = 2
    SERVER_UNAVAILABLE = 3
    BAD_USER_NAME_OR_PASSWORD = 4
    NOT_AUTHORIZED = 5


class ErrorType(enum.Enum):
    PAYLOAD_TOO_LONG = 'payload too long'
    STRING_TOO_LONG = 'string too long'
    UNSUPPORTED_PACKET_TYPE = 'unsupported packet type'


class EncodeError(Exception):

    def __init__(self,
                 error_type: ErrorType,
                 description: str | None = None):
        super().__init__(error_type, description)
        self._error_type = error_type
        self._description = description

    @property
    def error_type(self) -> ErrorType:
        return self._error_type

    @property
    def description(self) -> str | None:
        return self._description


class CommLogAction(enum.Enum):
    OPEN = 'open'
    CLOSE = 'close'
    SEND = 'send'


class Protocol(typing.NamedTuple):
    name: String
    level: UInt8


MQTT_V311: Protocol = Protocol(name='MQTT', level=4)
"""MQTT 3.1.1"""

MQISDP_V31: Protocol = Protocol(name='MQIsdp', level=3)
"""MQTT 3.1"""


class LastWill(typing.NamedTuple):
    topic: String
    message: String | Binary
    retain: bool
    qos: QoS


class Subscription(typing.NamedTuple):
    topic_filter: String
    qos: QoS


class SubscribeResult(typing.NamedTuple):
    failure: bool
    qos: QoS


class ConnectPacket(typing.NamedTuple):
    protocol: Protocol
    keep_alive: UInt16
    client_identifier: String
    clean_session: bool
    last_will: LastWill | None
    user_name: String | None
    password: String | Binary | None


class ConnAckPacket(typing.NamedTuple):
    session_present: bool
    return_code: ConnectReturnCode


class PublishPacket(typing.NamedTuple):
    duplicate: bool
    qos: QoS
    retain: bool
    topic_name: String
    packet_identifier: PacketIdentifier | None
    payload: util.Bytes


class PubAckPacket(typing.NamedTuple):
    packet_identifier: PacketIdentifier


class PubRecPacket(typing.NamedTuple):
    packet_identifier: PacketIdentifier


class PubRelPacket(typing.NamedTuple):
    packet_identifier: PacketIdentifier


class PubCompPacket(typing.NamedTuple):
    packet_identifier: PacketIdentifier


class SubscribePacket(typing.NamedTuple):
    packet_identifier: PacketIdentifier
    subscriptions: Collection[Subscription]


class SubAckPacket(typing.NamedTuple):
    packet_identifier: PacketIdentifier
    results: Collection[SubscribeResult]


class UnsubscribePacket(typing.NamedTuple):
    packet_identifier: PacketIdentifier
    topic_filters: Collection[String]


class UnsubAckPacket(typing.NamedTuple):
    packet_identifier: PacketIdentifier


class PingReqPacket(typing.NamedTuple):
    pass


class PingResPacket(typing.NamedTuple):
    pass


class DisconnectPacket(typing.NamedTuple):
    pass


Packet: typing.TypeAlias = (ConnectPacket |
                            ConnAckPacket |
                            PublishPacket |
                            PubAckPacket |
                            PubRecPacket |
                            PubRelPacket |
                            PubCompPacket |
                            SubscribePacket |
                            SubAckPacket |
                            UnsubscribePacket |
                            UnsubAckPacket |
                            PingReqPacket |
                            PingResPacket |
                            DisconnectPacket)
