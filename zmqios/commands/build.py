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
import argparse
import time

from zmqios.utils.context.namespace import CliNameSpace
from zmqios.utils.context.context import CliContext
from zmqios.utils.context.command import CliCommand
from zmqios.build_scripts.build_libpgm import build_libpgm
from zmqios.build_scripts.build_libzmq import build_libzmq
from zmqios.build_scripts.build_utils import load_config, print_build_time
from zmqios.build_scripts.errors import BuildError

BUILDERS = {
    "libzmq": build_libzmq,
    "libpgm": build_libpgm,
}


class Build(CliCommand):
    def description(self) -> str:
        return """Build universal static libraries for Apple platforms.

Every platform whose SDK is installed in Xcode is built, one architecture
at a time, then merged with lipo into dist/<platform>/lib.

SUPPORTED TARGETS:
    all         Build libzmq, then libpgm
    libzmq      Build ZeroMQ (libzmq.a)
    libpgm      Build OpenPGM (libpgm.a)

EXAMPLES:
    zmqios build libzmq
    zmqios build libzmq --version 4.3.5
    zmqios build libzmq --branch v4.3.x
    zmqios build all --platforms ios,macos
    zmqios build all --skip-platforms watchos -j 4
    zmqios build libpgm --keep-build

ARCHITECTURES:
    iOS         armv7, armv7s, arm64
    macOS       x86_64
    tvOS        arm64
    watchOS     armv7k

CONFIGURATION:
    An optional zmqios.toml in the current directory overrides jobs,
    compiler flags, architectures, branches and minimum OS versions.
    Command line options take precedence.
        """

    def get_target_list(self) -> list:
        return ["all", "libzmq", "libpgm"]

    def split_list(self, value) -> list:
        if not value:
            return []
        return [x.strip() for x in value.split(",") if x.strip()]

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="zmqios build",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "target",
            metavar=f"{self.get_target_list()}",
            type=str,
            choices=self.get_target_list(),
        )
        parser.add_argument(
            "--version",
            type=str,
            default=None,
            help="build this release (e.g. 4.3.5) instead of a branch head (libzmq only)",
        )
        parser.add_argument(
            "--branch",
            type=str,
            default=None,
            help="branch to download for head builds (default: master; libzmq only with 'all')",
        )
        parser.add_argument(
            "--platforms",
            type=str,
            help="comma-separated platforms to build, e.g. ios,macos (default: every installed SDK)",
        )
        parser.add_argument(
            "--skip-platforms",
            type=str,
            help="comma-separated platforms to skip",
        )
        parser.add_argument(
            "-j", "--jobs",
            type=int,
            default=None,
            help="number of make jobs (default: 8)",
        )
        parser.add_argument(
            "--keep-build",
            action="store_true",
            help="keep the build/ scratch directory after a successful build",
        )
        parser.add_argument(
            "--output-dir",
            type=str,
            default=None,
            help="directory receiving build/ and dist/ (single target only)",
        )
        if argv is None:
            module_name = os.path.splitext(os.path.basename(__file__))[0]
            argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(argv, namespace=CliNameSpace())
        return args

    def get_targets(self, target: str) -> list:
        if target == "all":
            return ["libzmq", "libpgm"]
        return [target]

    def exec(self, context: CliContext, args: CliNameSpace):
        start_time = time.time()
        targets = self.get_targets(args.target)

        if args.output_dir and len(targets) > 1:
            print("ERROR: --output-dir can only be used with a single target")
            sys.exit(1)

        try:
            config = load_config(context.home_path)
            for target in targets:
                BUILDERS[target](
                    output_dir=args.output_dir,
                    config=config,
                    branch=args.branch if target == "libzmq" or len(targets) == 1 else None,
                    version=args.version if target == "libzmq" else None,
                    only_platforms=self.split_list(args.platforms) or None,
                    skip_platforms=self.split_list(args.skip_platforms),
                    keep_build=True if args.keep_build else None,
                    jobs=args.jobs,
                )
        except BuildError as e:
            print(f"ERROR: {e}")
            sys.exit(1)

        if len(targets) > 1:
            print_build_time(start_time)
