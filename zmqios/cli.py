#
# Copyright 2024 zmqios Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

import os
import sys
import importlib
import argparse

from zmqios.utils.context.namespace import CliNameSpace
from zmqios.utils.context.context import CliContext
from zmqios.utils.context.command import CliCommand

SCRIPT_PATH = os.path.split(os.path.realpath(__file__))[0]
PACKAGE_NAME = os.path.basename(SCRIPT_PATH)


# Root Class for Command Line Interface
class Cli(CliCommand):
    def description(self) -> str:
        return """zmqios - ZeroMQ for Apple platforms

Downloads libzmq and libpgm, cross-compiles them for every installed
Apple SDK (iOS, macOS, tvOS, watchOS) and packages one universal static
library per platform.

USAGE:
    zmqios <command> [options]

COMMANDS:
    build       Build libzmq, libpgm or both
    sdks        Show the Xcode SDKs the build would use
    clean       Remove build/ and dist/ directories

EXAMPLES:
    zmqios build libzmq                  # Build libzmq from master
    zmqios build libzmq --version 4.3.5  # Build a libzmq release
    zmqios build all --platforms ios     # Build both libraries for iOS only
    zmqios sdks                          # List installed SDKs
    zmqios clean -y                      # Remove all build outputs

For more information on a specific command:
    zmqios <command> --help
        """

    def get_command_list(self) -> list:
        arr = []
        for command in os.listdir(os.path.join(SCRIPT_PATH, "commands")):
            if command.startswith("_") or command.startswith("test_"):
                continue
            if command.endswith(".py"):
                arr.append(os.path.splitext(os.path.basename(command))[0])
        return sorted(arr)

    def _parser(self, add_help=True) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="zmqios",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
            add_help=add_help,
        )
        parser.add_argument(
            "subcommand",
            metavar=f"{self.get_command_list()}",
            type=str,
            nargs="?",
            choices=self.get_command_list(),
        )
        return parser

    def cli(self, argv=None) -> CliNameSpace:
        argv = sys.argv[1:] if argv is None else argv
        # zmqios --help, but not zmqios build --help
        if len(argv) == 1 and argv[0] in ["--help", "-h"]:
            self._parser().print_help()
            sys.exit(0)

        # parse only known args - this will NOT consume --help if present
        args, unknown = self._parser(add_help=False).parse_known_args(
            argv, namespace=CliNameSpace()
        )
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        if not args.subcommand:
            print("ERROR: No command specified\n")
            self._parser().print_help()
            sys.exit(1)

        module = importlib.import_module(f"{PACKAGE_NAME}.commands.{args.subcommand}")
        klass = getattr(module, args.subcommand.capitalize())
        sub_cmd = klass()
        sub_cmd.exec(context, sub_cmd.cli())


def main():
    cmd = Cli()
    cmd.exec(CliContext(), cmd.cli())


if __name__ == "__main__":
    main()
