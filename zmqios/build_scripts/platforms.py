#!/usr/bin/env python3
# -- coding: utf-8 --
#
# platforms.py
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
Apple platform/architecture matrix.

Maps every supported "<platform>-<arch>" build type to the toolchain
settings autotools needs for a cross build:

    iOS-armv7        32-bit ARM (till iPhone 4s)
    iOS-armv7s       32-bit ARM (iPhone 5 till iPhone 5c)
    iOS-arm64        64-bit ARM (iPhone 5s and later)
    macOS-x86_64     64-bit Intel Mac
    tvOS-arm64       64-bit ARM (Apple TV 4)
    watchOS-armv7k   32-bit ARM Apple Watch
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Optional

from zmqios.build_scripts.errors import UnsupportedTargetError

VALID_ARCHS_PER_PLATFORM = {
    "iOS": ["armv7", "armv7s", "arm64"],
    "macOS": ["x86_64"],
    "tvOS": ["arm64"],
    "watchOS": ["armv7k"],
}

DEFAULT_MIN_VERSIONS = {
    "iOS": "10.0",
    "macOS": "10.11",
    "tvOS": "9.0",
    "watchOS": "2.0",
}

DEFAULT_CXXFLAGS = "-Os"
# Enable Bitcode
DEFAULT_OTHER_CPPFLAGS = "-Os -fembed-bitcode"


@dataclass(frozen=True)
class PlatformConfig:
    name: str
    sdk_platform: str  # directory name under Xcode's Platforms/
    version_min_flag: str
    archs: tuple = ()
    min_version: str = ""


PLATFORMS = {
    "iOS": PlatformConfig("iOS", "iPhoneOS", "-mios-version-min",
                          tuple(VALID_ARCHS_PER_PLATFORM["iOS"]), DEFAULT_MIN_VERSIONS["iOS"]),
    "macOS": PlatformConfig("macOS", "MacOSX", "-mmacosx-version-min",
                            tuple(VALID_ARCHS_PER_PLATFORM["macOS"]), DEFAULT_MIN_VERSIONS["macOS"]),
    "tvOS": PlatformConfig("tvOS", "AppleTVOS", "-mtvos-version-min",
                           tuple(VALID_ARCHS_PER_PLATFORM["tvOS"]), DEFAULT_MIN_VERSIONS["tvOS"]),
    "watchOS": PlatformConfig("watchOS", "WatchOS", "-mwatchos-version-min",
                              tuple(VALID_ARCHS_PER_PLATFORM["watchOS"]), DEFAULT_MIN_VERSIONS["watchOS"]),
}


@dataclass(frozen=True)
class _MatrixEntry:
    host: str
    thumb: bool = True  # ARM targets link with -mthumb and the SDK sysroot


BUILD_MATRIX = {
    "iOS-armv7": _MatrixEntry("armv7-apple-darwin"),
    "iOS-armv7s": _MatrixEntry("armv7s-apple-darwin"),
    "iOS-arm64": _MatrixEntry("arm-apple-darwin"),
    "macOS-x86_64": _MatrixEntry("x86_64-apple-darwin", thumb=False),
    "tvOS-arm64": _MatrixEntry("arm-apple-darwin"),
    "watchOS-armv7k": _MatrixEntry("armv7k-apple-darwin"),
}


@dataclass(frozen=True)
class ArchitectureBuildConfig:
    platform: str
    arch: str
    base_dir: str
    sdk_root: str
    host: str
    cxxflags: str
    cppflags: str
    ldflags: str
    toolchain_dir: str

    @property
    def build_type(self) -> str:
        return f"{self.platform}-{self.arch}"

    def environ(self, base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        Build the environment for one configure/make invocation.

        Returns a new mapping; neither `base` nor os.environ is modified.
        """
        env = dict(os.environ if base is None else base)
        search_path = env.get("PATH", "")
        env.update(
            {
                "BASEDIR": self.base_dir,
                "ISDKROOT": self.sdk_root,
                "CXXFLAGS": self.cxxflags,
                "CPPFLAGS": self.cppflags,
                "LDFLAGS": self.ldflags,
                "PATH": f"{self.toolchain_dir}/usr/bin:{self.toolchain_dir}/usr/sbin"
                + (f":{search_path}" if search_path else ""),
            }
        )
        return env


def supported_build_types() -> List[str]:
    return list(BUILD_MATRIX.keys())


def lookup(
    platform: str,
    arch: str,
    sdk_version: str,
    developer_dir: str,
    min_version: Optional[str] = None,
    cxxflags: str = DEFAULT_CXXFLAGS,
    other_cppflags: str = DEFAULT_OTHER_CPPFLAGS,
) -> ArchitectureBuildConfig:
    """
    Resolve the toolchain configuration of one platform/architecture pair.

    Args:
        platform: Platform name as reported by SDK discovery (e.g. "iOS")
        arch: Architecture identifier (e.g. "arm64")
        sdk_version: Installed SDK version of the platform (e.g. "17.0")
        developer_dir: Output of `xcode-select -print-path`
        min_version: Minimum OS version, defaults to the platform default
        cxxflags: Value for CXXFLAGS
        other_cppflags: Flags appended to CPPFLAGS after the target flags

    Raises:
        UnsupportedTargetError: If the pair is not in the matrix
    """
    build_type = f"{platform}-{arch}"
    entry = BUILD_MATRIX.get(build_type)
    if entry is None or platform not in PLATFORMS:
        raise UnsupportedTargetError(build_type)

    platform_config = PLATFORMS[platform]
    min_version = min_version or platform_config.min_version
    sdk_platform = platform_config.sdk_platform
    base_dir = f"{developer_dir}/Platforms/{sdk_platform}.platform/Developer"
    sdk_root = f"{base_dir}/SDKs/{sdk_platform}{sdk_version}.sdk"

    cppflags = (
        f"-arch {arch} -isysroot {sdk_root} "
        f"{platform_config.version_min_flag}={min_version} {other_cppflags}"
    ).strip()
    if entry.thumb:
        ldflags = f"-mthumb -arch {arch} -isysroot {sdk_root}"
    else:
        ldflags = f"-arch {arch}"

    return ArchitectureBuildConfig(
        platform=platform,
        arch=arch,
        base_dir=base_dir,
        sdk_root=sdk_root,
        host=entry.host,
        cxxflags=cxxflags,
        cppflags=cppflags,
        ldflags=ldflags,
        toolchain_dir=f"{developer_dir}/Toolchains/XcodeDefault.xctoolchain",
    )
