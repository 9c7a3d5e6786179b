import argparse
import sys

from rxlink import (
    LinkManager,
    NotConnectedError,
    PeerHandle,
    get_default_providers,
    transport_factory,
)


def add_link_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("address", type=str, help="MAC address, or serial device path with --serial")
    parser.add_argument("--name", type=str, default="peripheral")
    parser.add_argument("--channel", type=int, default=1, help="RFCOMM channel")
    parser.add_argument("--serial", action="store_true", help="use a serial port instead of RFCOMM")
    parser.add_argument("--baudrate", type=int, default=9600)
    parser.add_argument("--timeout", type=float, default=10.0, help="seconds to wait for the connection")


def open_link(parsed_args: argparse.Namespace) -> LinkManager:
    tracer_provider, logger_provider = get_default_providers("rxlink.console")
    if parsed_args.serial:
        transport = transport_factory("serial", baudrate=parsed_args.baudrate)
    else:
        transport = transport_factory("rfcomm")

    link = LinkManager(
        transport,
        tracer_provider=tracer_provider,
        logger_provider=logger_provider,
    )
    link.messages.subscribe(lambda text: print(f"<< {text}"))
    link.connectivity.subscribe(lambda connected: print(f"-- connected: {connected}"))
    link.errors.subscribe(lambda reason: print(f"!! {reason}"))
    link.connect(PeerHandle(parsed_args.name, parsed_args.address, parsed_args.channel))
    return link


def build_parser(subparsers: argparse._SubParsersAction):
    parser = subparsers.add_parser("link", help="send stdin lines to a peripheral and print what it sends back.")
    add_link_arguments(parser)
    parser.set_defaults(func=task)


def task(parsed_args: argparse.Namespace):
    with open_link(parsed_args) as link:
        try:
            link.wait_until_connected(parsed_args.timeout)
        except NotConnectedError as e:
            print(f"Connection failed: {e}")
            return

        try:
            for line in sys.stdin:
                line = line.strip()
                if line:
                    link.write(line)
        except KeyboardInterrupt:
            print("\nKeyboard Interrupt.")
