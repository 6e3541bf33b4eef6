#!/usr/bin/env python3
# -- coding: utf-8 --
#
# build_libzmq.py
# zmqios
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

"""
libzmq build script for Apple platforms.

Downloads ZeroMQ (the master branch by default, or a release given with
--version), cross-compiles it for every installed Apple SDK and merges
the results into one universal static library per platform.

Usage:
    python3 build_libzmq.py [version]

Output:
    - Libraries: dist/<platform>/lib/libzmq.a
    - Headers:   dist/<platform>/include/
"""

import sys

from zmqios.build_scripts.build_utils import load_config
from zmqios.build_scripts.errors import BuildError
from zmqios.build_scripts.pipeline import BuildPipeline
from zmqios.build_scripts.recipe import LibraryRecipe, disable_clock_gettime_patch

LIBZMQ_RECIPE = LibraryRecipe(
    name="libzmq",
    libname="libzmq.a",
    source_dir_name="zeromq",
    head_url="https://github.com/zeromq/libzmq/tarball/{branch}",
    extracted_glob="zeromq-libzmq-*",
    stable_url="https://github.com/zeromq/libzmq/releases/download/v{version}/zeromq-{version}.tar.gz",
    stable_extracted_name="zeromq-{version}",
    post_configure_patch=disable_clock_gettime_patch("src/platform.hpp"),
    # libpgm and libsodium are left out, the build fails with them
    configure_args=("--enable-drafts", "--without-docs"),
    run_autoreconf=True,
    min_versions={
        "iOS": "10.0",
        "macOS": "10.11",
        "tvOS": "9.0",
        "watchOS": "2.0",
    },
    output_dir=".",
)


def build_libzmq(output_dir=None, config=None, **kwargs):
    """
    Build universal libzmq libraries for every installed Apple SDK.

    Args:
        output_dir: Directory receiving build/ and dist/ (default: recipe output_dir)
        config: Configuration from zmqios.toml, loaded when omitted
        **kwargs: Passed through to BuildPipeline (branch, version, jobs, ...)

    Returns:
        list: The DistributionBundle of every assembled platform
    """
    if config is None:
        config = load_config()
    lib_config = config.get("LIBRARIES", {}).get(LIBZMQ_RECIPE.name, {})
    output_dir = output_dir or lib_config.get("output_dir") or LIBZMQ_RECIPE.output_dir
    return BuildPipeline(LIBZMQ_RECIPE, output_dir, config=config, **kwargs).run()


def main():
    version = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        build_libzmq(version=version)
    except BuildError as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
