import argparse
import asyncio
import contextlib
import logging.config

from hat import aio

from hat import mqtt3
from hat.mqtt3 import tcp


def create_argument_parser():
    parser = argparse.ArgumentParser()

    parser.add_argument(
        '--port', type=int, metavar='PORT', dest='port', default=1883,
        help='server TCP port, defaults to 1883')
    parser.add_argument(
        '--client-id', metavar='ID', dest='client_id', default='hat-mqtt3',
        help='client identifier, defaults to hat-mqtt3')
    parser.add_argument(
        '--qos', type=int, metavar='QoS', dest='qos', default=0,
        help='quality of service, defaults to 0 (values: 0, 1, 2)')
    parser.add_argument(
        '--log-level', metavar='LEVEL', dest='log_level', default='INFO',
        choices=['CRITICAL', 'ERROR', 'WARNING', 'INFO', 'DEBUG'],
        help='log level, defaults to INFO')

    parser.add_argument(
        'host', metavar='HOST',
        help='server hostname')

    subparsers = parser.add_subparsers(
        dest='action',
        help='available commands')

    subparser_publish = subparsers.add_parser(
        'publish',
        help='publish message')
    subparser_publish.add_argument(
        '--retain', action='store_true',
        help='retain message')
    subparser_publish.add_argument(
        'topic', metavar='TOPIC',
        help='message topic')
    subparser_publish.add_argument(
        'payload', metavar='PAYLOAD',
        help='message payload')

    subparser_subscribe = subparsers.add_parser(
        'subscribe',
        help='send subscribe request')
    subparser_subscribe.add_argument(
        'topics', metavar='TOPIC', nargs='+',
        help='subscription topic')

    subparsers.add_parser(
        'ping',
        help='send ping request')

    return parser


def main():
    parser = create_argument_parser()
    args = parser.parse_args()

    logging.config.dictConfig({
        'version': 1,
        'formatters': {
            'console': {
                'format': '[%(asctime)s %(levelname)s %(name)s] %(message)s'}},
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'console',
                'level': args.log_level}},
        'loggers': {
            'hat.mqtt3': {
                'level': args.log_level}},
        'root': {
            'level': 'WARNING',
            'handlers': ['console']},
        'disable_existing_loggers': False})

    aio.init_asyncio()

    with contextlib.suppress(asyncio.CancelledError):
        aio.run_asyncio(async_main(args))


async def async_main(args):
    addr = tcp.Address(args.host, args.port)
    qos = mqtt3.QoS(args.qos)

    if args.action == 'publish':
        packet = mqtt3.PublishPacket(
            duplicate=False,
            qos=qos,
            retain=args.retain,
            topic_name=args.topic,
            packet_identifier=(None if qos == mqtt3.QoS.AT_MOST_ONCE
                               else 1),
            payload=args.payload.encode())

    elif args.action == 'subscribe':
        packet = mqtt3.SubscribePacket(
            packet_identifier=1,
            subscriptions=[mqtt3.Subscription(topic_filter=topic, qos=qos)
                           for topic in args.topics])

    elif args.action == 'ping':
        packet = mqtt3.PingReqPacket()

    else:
        raise ValueError('unsupported action')

    conn = await mqtt3.connect(addr, name=args.client_id)

    try:
        connect = mqtt3.ConnectPacket(protocol=mqtt3.MQTT_V311,
                                      keep_alive=60,
                                      client_identifier=args.client_id,
                                      clean_session=True,
                                      last_will=None,
                                      user_name=None,
                                      password=None)

        await conn.send_many([connect, packet, mqtt3.DisconnectPacket()])
        await conn.drain()

    finally:
        await aio.uncancellable(conn.async_close())


if __name__ == '__main__':
    main()
