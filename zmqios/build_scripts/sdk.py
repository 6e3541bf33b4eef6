#!/usr/bin/env python3
# -- coding: utf-8 --
#
# sdk.py
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
Xcode toolchain discovery.

Asks the installed Xcode which platform SDKs are present, where the
developer directory lives and which lipo binary to use. Every query is
read-only. Failing to list SDKs or to find the developer directory is
fatal. A missing lipo is only reported here; assembly fails later if it
actually has libraries to merge.
"""

import re
import subprocess
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Tuple

from zmqios.build_scripts.errors import SdkDiscoveryError
from zmqios.utils.cmd.cmd_util import exec_command

# Checked in order, the first match on a line wins
SDK_PATTERNS = [
    ("iOS", re.compile(r"-sdk iphoneos(\S+)")),
    ("macOS", re.compile(r"-sdk macosx(\S+)")),
    ("tvOS", re.compile(r"-sdk appletvos(\S+)")),
    ("watchOS", re.compile(r"-sdk watchos(\S+)")),
]

SHOW_SDKS_CMD = ["xcodebuild", "-showsdks"]
PRINT_DEVELOPER_DIR_CMD = ["xcode-select", "-print-path"]
FIND_LIPO_CMD = ["xcrun", "-find", "lipo"]

QueryFn = Callable[[list], Tuple[int, str]]


@dataclass
class Toolchain:
    """Everything the build needs to know about the local Xcode install."""
    developer_dir: str
    lipo: Optional[str]
    sdk_versions: Dict[str, str] = field(default_factory=dict)

    @property
    def platforms(self) -> list:
        return list(self.sdk_versions.keys())


def parse_sdks(output: str) -> Dict[str, str]:
    """
    Parse `xcodebuild -showsdks` output into {platform: sdk version}.

    Platforms that do not appear are left out. When a platform is listed
    more than once the last listed version is kept.
    """
    sdk_versions = {}
    for line in output.splitlines():
        for platform_name, pattern in SDK_PATTERNS:
            match = pattern.search(line)
            if match:
                sdk_versions[platform_name] = match.group(1)
                break
    return sdk_versions


def _query(command, query_fn: QueryFn) -> str:
    try:
        err_code, output = query_fn(command)
    except (OSError, subprocess.SubprocessError) as e:
        raise SdkDiscoveryError(f"Cannot run '{' '.join(command)}': {e}") from e
    if err_code != 0:
        raise SdkDiscoveryError(
            f"'{' '.join(command)}' failed ({err_code}): {output.strip()}"
        )
    return output


def find_sdks(query_fn: QueryFn = exec_command) -> Dict[str, str]:
    return parse_sdks(_query(SHOW_SDKS_CMD, query_fn))


def get_developer_dir(query_fn: QueryFn = exec_command) -> str:
    return _query(PRINT_DEVELOPER_DIR_CMD, query_fn).strip()


def find_lipo(query_fn: QueryFn = exec_command) -> str:
    return _query(FIND_LIPO_CMD, query_fn).strip()


def discover_toolchain(query_fn: QueryFn = exec_command) -> Toolchain:
    developer_dir = get_developer_dir(query_fn)
    sdk_versions = find_sdks(query_fn)
    try:
        lipo = find_lipo(query_fn)
    except SdkDiscoveryError as e:
        print(f"   ⚠️  Warning: lipo not found: {e}")
        lipo = None
    toolchain = Toolchain(developer_dir=developer_dir, lipo=lipo, sdk_versions=sdk_versions)
    print(f"iOS     SDK version = {toolchain.sdk_versions.get('iOS', '')}")
    print(f"macOS   SDK version = {toolchain.sdk_versions.get('macOS', '')}")
    print(f"watchOS SDK version = {toolchain.sdk_versions.get('watchOS', '')}")
    print(f"tvOS    SDK version = {toolchain.sdk_versions.get('tvOS', '')}")
    return toolchain
