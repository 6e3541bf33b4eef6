#!/usr/bin/env python3
# -- coding: utf-8 --
#
# build_libpgm.py
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
OpenPGM (libpgm) build script for Apple platforms.

Only the pgm/ subdirectory of the openpgm repository is kept. It needs
three source patches before autoreconf can produce a cross-compilable
configure script.

Output:
    - Libraries: libpgm-ios/dist/<platform>/lib/libpgm.a
    - Headers:   libpgm-ios/dist/<platform>/include/
"""

import sys

from zmqios.build_scripts.build_utils import load_config
from zmqios.build_scripts.errors import BuildError
from zmqios.build_scripts.pipeline import BuildPipeline
from zmqios.build_scripts.recipe import LibraryRecipe, TextPatch, disable_clock_gettime_patch

LIBPGM_SOURCE_PATCHES = (
    TextPatch(
        path="configure.ac",
        pattern=r"AC_CHECK_FILES",
        replacement="# AC_CHECK_FILES",
        global_replace=True,
        description="allow cross compiling",
    ),
    TextPatch(
        path="include/pgm/in.h",
        kind="line_prefix",
        replacement="// ",
        line_range=(39, 50),
        description="comment out conflicting definitions",
    ),
    TextPatch(
        path="cpu.c",
        pattern=r"#ifndef _MSC_VER",
        replacement="#if defined(__i386__) || defined(__x86_64__)",
        description="keep x86 assembly off ARM",
    ),
)

LIBPGM_RECIPE = LibraryRecipe(
    name="libpgm",
    libname="libpgm.a",
    source_dir_name="libpgm",
    head_url="https://github.com/steve-o/openpgm/tarball/{branch}",
    extracted_glob="steve-o-*",
    keep_subdir="openpgm/pgm",
    source_patches=LIBPGM_SOURCE_PATCHES,
    post_configure_patch=disable_clock_gettime_patch("include/config.h"),
    run_autoreconf=True,
    min_versions={
        "iOS": "9.0",
        "macOS": "10.11",
        "tvOS": "9.0",
        "watchOS": "2.0",
    },
    output_dir="libpgm-ios",
)


def build_libpgm(output_dir=None, config=None, **kwargs):
    """Build universal libpgm libraries for every installed Apple SDK."""
    if config is None:
        config = load_config()
    lib_config = config.get("LIBRARIES", {}).get(LIBPGM_RECIPE.name, {})
    output_dir = output_dir or lib_config.get("output_dir") or LIBPGM_RECIPE.output_dir
    return BuildPipeline(LIBPGM_RECIPE, output_dir, config=config, **kwargs).run()


def main():
    try:
        build_libpgm()
    except BuildError as e:
        print(f"ERROR: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
