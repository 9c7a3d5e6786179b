import argparse

from . import task_dispense, task_link


def main(argv=None):
    parser = argparse.ArgumentParser(prog="python -m tasks")
    subparsers = parser.add_subparsers(required=True)
    task_link.build_parser(subparsers)
    task_dispense.build_parser(subparsers)

    parsed_args = parser.parse_args(argv)
    parsed_args.func(parsed_args)


if __name__ == "__main__":
    main()
