"""MQTT 3.1/3.1.1 packet encoder"""

from hat.mqtt3.common import (MAX_REMAINING_LENGTH,
                              MAX_VARIABLE_BYTE_INTEGER,
                              MAX_STRING_LENGTH,
                              UInt8,
                              UInt16,
                              String,
                              Binary,
                              PacketIdentifier,
                              QoS,
                              ConnectReturnCode,
                              ErrorType,
                              EncodeError,
                              Protocol,
                              MQTT_V311,
                              MQISDP_V31,
                              LastWill,
                              Subscription,
                              SubscribeResult,
                              ConnectPacket,
                              ConnAckPacket,
                              PublishPacket,
                              PubAckPacket,
                              PubRecPacket,
                              PubRelPacket,
                              PubCompPacket,
                              SubscribePacket,
                              SubAckPacket,
                              UnsubscribePacket,
                              UnsubAckPacket,
                              PingReqPacket,
                              PingResPacket,
                              DisconnectPacket,
                              Packet)
from hat.mqtt3.connection import (ConnectionCb,
                                  connect,
                                  listen,
                                  Connection)
from hat.mqtt3.encoder import (encode_packet,
                               write_packet,
                               write_remaining_length,
                               write_string)
from hat.mqtt3.sink import (Sink,
                            BytesSink,
                            StreamSink)


__all__ = ['MAX_REMAINING_LENGTH',
           'MAX_VARIABLE_BYTE_INTEGER',
           'MAX_STRING_LENGTH',
           'UInt8',
           'UInt16',
           'String',
           'Binary',
           'PacketIdentifier',
           'QoS',
           'ConnectReturnCode',
           'ErrorType',
           'EncodeError',
           'Protocol',
           'MQTT_V311',
           'MQISDP_V31',
           'LastWill',
           'Subscription',
           'SubscribeResult',
           'ConnectPacket',
           'ConnAckPacket',
           'PublishPacket',
           'PubAckPacket',
           'PubRecPacket',
           'PubRelPacket',
           'PubCompPacket',
           'SubscribePacket',
           'SubAckPacket',
           'UnsubscribePacket',
           'UnsubAckPacket',
           'PingReqPacket',
           'PingResPacket',
           'DisconnectPacket',
           'Packet',
           'ConnectionCb',
           'connect',
           'listen',
           'Connection',
           'encode_packet',
           'write_packet',
           'write_remaining_length',
           'write_string',
           'Sink',
           'BytesSink',
           'StreamSink']
