#!/usr/bin/env python3
# -- coding: utf-8 --
#
# assemble.py
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
Universal library assembly.

Merges the per-architecture static libraries of one platform into a
single fat archive with lipo and copies the headers next to it:

    dist/<platform>/lib/<libname>
    dist/<platform>/include/...

Headers are taken from the first architecture that installed any; all
architectures are assumed to install identical headers.
"""

import os
import shutil
from dataclasses import dataclass
from typing import List, Optional, Sequence

from zmqios.build_scripts.cross_build import BuildArtifact, RunFn, check_call
from zmqios.build_scripts.errors import AssemblyError
from zmqios.utils.cmd.cmd_util import run_command


@dataclass(frozen=True)
class DistributionBundle:
    platform: str
    library: str
    include_dir: Optional[str]


def lipo_libs(src_libs: List[str], dst_lib: str, lipo: str = "lipo", runner: RunFn = run_command):
    """Create a universal (fat) archive from architecture-specific archives."""
    os.makedirs(os.path.dirname(dst_lib), exist_ok=True)
    check_call([lipo, "-create"] + list(src_libs) + ["-output", dst_lib], runner)


def check_artifacts(artifacts: Sequence[BuildArtifact]):
    for artifact in artifacts:
        if not os.path.isfile(artifact.path):
            raise AssemblyError(f"Missing library for {artifact.platform}-{artifact.arch}: {artifact.path}")
        if os.path.getsize(artifact.path) == 0:
            raise AssemblyError(f"Empty library for {artifact.platform}-{artifact.arch}: {artifact.path}")


def copy_headers(platform: str, archs: Sequence[str], build_dir: str, dist_platform_dir: str) -> Optional[str]:
    for arch in archs:
        include_dir = os.path.join(build_dir, f"{platform}-{arch}", "include")
        if os.path.isdir(include_dir):
            dst = os.path.join(dist_platform_dir, "include")
            shutil.copytree(include_dir, dst, dirs_exist_ok=True)
            return dst
    print(f"   ⚠️  Warning: no headers installed for {platform}")
    return None


def assemble(
    platform: str,
    artifacts: Sequence[BuildArtifact],
    build_dir: str,
    dist_dir: str,
    libname: str,
    archs: Sequence[str],
    lipo: Optional[str] = "lipo",
    runner: RunFn = run_command,
) -> Optional[DistributionBundle]:
    """
    Build the distribution bundle of one platform.

    Returns:
        DistributionBundle, or None when the platform has no artifacts

    Raises:
        AssemblyError: If a listed library is missing or empty, or there is
            no lipo to merge them with
        CommandError: If lipo fails
    """
    if not artifacts:
        print(f"   ⚠️  Warning: Nothing to do for {libname} on {platform}")
        return None

    check_artifacts(artifacts)
    if not lipo:
        raise AssemblyError(f"lipo is required to combine {libname} for {platform}")

    dist_platform_dir = os.path.join(dist_dir, platform.lower())
    dst_lib = os.path.join(dist_platform_dir, "lib", libname)
    print(f"Combining {len(artifacts)} libraries into {libname} for {platform}...")
    lipo_libs([a.path for a in artifacts], dst_lib, lipo=lipo, runner=runner)

    include_dir = copy_headers(platform, archs, build_dir, dist_platform_dir)
    return DistributionBundle(platform=platform, library=dst_lib, include_dir=include_dir)
