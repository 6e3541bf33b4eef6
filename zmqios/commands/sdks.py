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
from zmqios.build_scripts import sdk
from zmqios.build_scripts.build_utils import load_config
from zmqios.build_scripts.errors import BuildError, UnsupportedTargetError
from zmqios.build_scripts.platforms import lookup


class Sdks(CliCommand):
    def description(self) -> str:
        return """
        This is a subcommand to show the Xcode SDKs a build would use.

        Platforms missing from the list are skipped by `zmqios build`.

        Examples:
            zmqios sdks              # List installed SDKs
            zmqios sdks --verbose    # Also print the per-architecture toolchain settings
        """

    def cli(self, argv=None) -> CliNameSpace:
        parser = argparse.ArgumentParser(
            prog="zmqios sdks",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            description=self.description(),
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="show host triple, SDK root and flags of every architecture",
        )
        if argv is None:
            module_name = os.path.splitext(os.path.basename(__file__))[0]
            argv = [x for x in sys.argv[1:] if x != module_name]
        args, unknown = parser.parse_known_args(argv, namespace=CliNameSpace())
        return args

    def exec(self, context: CliContext, args: CliNameSpace):
        try:
            toolchain = sdk.discover_toolchain()
            config = load_config(context.home_path)
        except BuildError as e:
            print(f"ERROR: {e}")
            sys.exit(1)

        print(f"\nDeveloper dir: {toolchain.developer_dir}")
        print(f"lipo:          {toolchain.lipo or 'not found'}")
        if not toolchain.sdk_versions:
            print("\n  ⚠️  No Apple platform SDK found, nothing would be built")
            return

        for platform, version in toolchain.sdk_versions.items():
            archs = config["PLATFORM_ARCHS"].get(platform, [])
            print(f"\n  {platform} {version}: {', '.join(archs)}")
            if not args.verbose:
                continue
            for arch in archs:
                try:
                    arch_config = lookup(platform, arch, version, toolchain.developer_dir)
                except UnsupportedTargetError as e:
                    print(f"    ❌ {e}")
                    continue
                print(f"    {arch_config.build_type}")
                print(f"      host:     {arch_config.host}")
                print(f"      sdk root: {arch_config.sdk_root}")
                print(f"      CPPFLAGS: {arch_config.cppflags}")
                print(f"      LDFLAGS:  {arch_config.ldflags}")
