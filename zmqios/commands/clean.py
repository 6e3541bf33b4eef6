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

from zmqios.utils.context.namespace import CliNameSpace
from zmqios.utils.context.context import CliContext
from zmqios.utils.context.command import CliCommand
from zmqios.build_scripts.build_libpgm import LIBPGM_RECIPE
from zmqios.build_scripts.build_libzmq import LIBZMQ_RECIPE
from zmqios.build_scripts.build_utils import (
    BUILD_DIR_NAME,
    DIST_DIR_NAME,
    load_config,
    remove_dir,
)
from zmqios.build_scripts.errors import BuildError

RECIPES = {
    "libzmq": LIBZMQ_RECIPE,
    "libpgm": LIBPGM_RECIPE,
}


class Clean(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to clean build outputs.

        Cleans the following directories of each library:
        - build/          # Scratch directory left by a failed or --keep-build run
        - dist/           # Universal libraries and headers

        Examples:
            zmqios clean              # Clean all libraries (with confirmation)
            zmqios clean libpgm       # Clean only libpgm
            zmqios clean --dry-run    # Preview what will be cleaned
            zmqios clean -y           # Clean without confirmation
            zmqios clean --build-only # Keep dist/, remove build/
        """

    def get_target_list(self) -> list:
        return ["all", "libzmq", "libpgm"]

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="zmqios clean",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "target",
            nargs="?",
            default="all",
            type=str,
            choices=self.get_target_list(),
            help="Library to clean (default: all)",
        )
        parser.add_argument(
            "--build-only",
            action="store_true",
            help="Clean only the build/ scratch directory",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be cleaned without actually deleting",
        )
        parser.add_argument(
            "-y", "--yes",
            action="store_true",
            help="Skip confirmation prompts",
        )
        if argv is None:
            module_name = os.path.splitext(os.path.basename(__file__))[0]
            argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(argv, namespace=CliNameSpace())
        return args

    def collect_paths(self, project_dir: str, config: dict, target: str, build_only: bool) -> list:
        names = list(RECIPES.keys()) if target == "all" else [target]
        paths = []
        for name in names:
            lib_config = config.get("LIBRARIES", {}).get(name, {})
            output_dir = lib_config.get("output_dir") or RECIPES[name].output_dir
            output_dir = os.path.abspath(os.path.join(project_dir, output_dir))
            paths.append(os.path.join(output_dir, BUILD_DIR_NAME))
            if not build_only:
                paths.append(os.path.join(output_dir, DIST_DIR_NAME))
        return [p for p in paths if os.path.exists(p)]

    def exec(self, context: CliContext, args: CliNameSpace):
        print("Cleaning build outputs...\n")
        try:
            config = load_config(context.home_path)
        except BuildError as e:
            print(f"ERROR: {e}")
            sys.exit(1)

        paths = self.collect_paths(context.home_path, config, args.target, args.build_only)
        if not paths:
            print("Nothing to clean.")
            return

        if args.dry_run:
            for path in paths:
                remove_dir(path, dry_run=True)
            return

        if not args.yes:
            print("The following directories will be removed:")
            for path in paths:
                print(f"  {path}")
            answer = input("\nContinue? [y/N] ").strip().lower()
            if answer not in ("y", "yes"):
                print("Aborted.")
                return

        for path in paths:
            remove_dir(path)
        print("\n✅ Clean completed")
