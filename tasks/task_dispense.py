import argparse
import threading

from rxlink import NotConnectedError, build_dispense_command, order_ready, parse_ultrasonic

from .task_link import add_link_arguments, open_link


def build_parser(subparsers: argparse._SubParsersAction):
    parser = subparsers.add_parser("dispense", help="send one order and wait until every item is detected.")
    add_link_arguments(parser)
    parser.add_argument("quantities", type=int, nargs="+", help="item count per slot, slot 1 first")
    parser.add_argument("--motors", type=int, default=10)
    parser.set_defaults(func=task)


def task(parsed_args: argparse.Namespace):
    command = build_dispense_command(parsed_args.quantities, parsed_args.motors)
    ready = threading.Event()

    def on_message(text: str):
        detected = parse_ultrasonic(text)
        if detected is not None and order_ready(detected, parsed_args.quantities):
            ready.set()

    with open_link(parsed_args) as link:
        link.messages.subscribe(on_message)
        try:
            link.wait_until_connected(parsed_args.timeout)
        except NotConnectedError as e:
            print(f"Connection failed: {e}")
            return

        print(f">> {command}")
        if not link.write(command):
            return

        try:
            while not ready.wait(0.5):
                if not link.is_connected():
                    print("Link lost before the order was ready.")
                    return
            print("Order ready.")
        except KeyboardInterrupt:
            print("\nKeyboard Interrupt.")
