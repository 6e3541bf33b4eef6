#!/usr/bin/env python3
# -- coding: utf-8 --
#
# build_utils.py
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
Build utility functions shared by the library build scripts.

This module provides:
- Loading of the optional zmqios.toml configuration
- Build/dist directory reset and cleanup
- Build time reporting
"""

import copy
import os
import shutil
import sys
import time

if sys.version_info >= (3, 11, 0, "alpha", 7):
    import tomllib
else:
    import tomli as tomllib

from zmqios.build_scripts.errors import ConfigError
from zmqios.build_scripts.platforms import (
    DEFAULT_CXXFLAGS,
    DEFAULT_OTHER_CPPFLAGS,
    VALID_ARCHS_PER_PLATFORM,
)

CONFIG_FILE_NAME = "zmqios.toml"
BUILD_DIR_NAME = "build"
DIST_DIR_NAME = "dist"

DEFAULT_CONFIG = {
    "JOBS": 8,
    "KEEP_BUILD": False,
    "CXXFLAGS": DEFAULT_CXXFLAGS,
    "CPPFLAGS": DEFAULT_OTHER_CPPFLAGS,
    "PLATFORM_ARCHS": VALID_ARCHS_PER_PLATFORM,
    "LIBRARIES": {},
}

LIBRARY_KEYS = {"branch": str, "version": str, "output_dir": str, "min_versions": dict}


def default_config() -> dict:
    return copy.deepcopy(DEFAULT_CONFIG)


def _expect(value, expected_type, key):
    if not isinstance(value, expected_type):
        raise ConfigError(
            f"'{key}' in {CONFIG_FILE_NAME} must be {expected_type.__name__}, got {type(value).__name__}"
        )
    return value


def parse_config(toml_data: dict) -> dict:
    """
    Convert parsed TOML data into the build configuration dictionary.

    Unknown platforms under [platforms] are kept; the build fails later
    with an unsupported platform/architecture error if they are used.
    """
    config = default_config()

    build = _expect(toml_data.get("build", {}), dict, "build")
    if "jobs" in build:
        config["JOBS"] = _expect(build["jobs"], int, "build.jobs")
    if "keep_build" in build:
        config["KEEP_BUILD"] = _expect(build["keep_build"], bool, "build.keep_build")
    if "cxxflags" in build:
        config["CXXFLAGS"] = _expect(build["cxxflags"], str, "build.cxxflags")
    if "cppflags" in build:
        config["CPPFLAGS"] = _expect(build["cppflags"], str, "build.cppflags")

    platforms = _expect(toml_data.get("platforms", {}), dict, "platforms")
    for platform_name, archs in platforms.items():
        archs = _expect(archs, list, f"platforms.{platform_name}")
        config["PLATFORM_ARCHS"][platform_name] = [
            _expect(a, str, f"platforms.{platform_name}") for a in archs
        ]

    for lib_name in ("libzmq", "libpgm"):
        lib = _expect(toml_data.get(lib_name, {}), dict, lib_name)
        lib_config = {}
        for key, value in lib.items():
            if key not in LIBRARY_KEYS:
                raise ConfigError(f"Unknown key '{lib_name}.{key}' in {CONFIG_FILE_NAME}")
            lib_config[key] = _expect(value, LIBRARY_KEYS[key], f"{lib_name}.{key}")
        config["LIBRARIES"][lib_name] = lib_config

    return config


def load_config(project_dir=None) -> dict:
    """
    Load zmqios.toml from `project_dir` (default: current directory).

    Falls back to the built-in defaults when the file does not exist.

    Raises:
        ConfigError: If the file exists but cannot be parsed
    """
    project_dir = project_dir or os.getcwd()
    config_file = os.path.join(project_dir, CONFIG_FILE_NAME)

    if not os.path.isfile(config_file):
        print(f"   ⚠️  Warning: {CONFIG_FILE_NAME} not found at {config_file}")
        print("   ⚠️  Using default configuration values")
        return default_config()

    try:
        with open(config_file, "rb") as f:
            toml_data = tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        raise ConfigError(f"Error reading {config_file}: {e}") from e
    return parse_config(toml_data)


def reset_dir(path: str):
    """Delete `path` if it exists and create it empty."""
    if os.path.isdir(path):
        shutil.rmtree(path)
    os.makedirs(path)


def remove_dir(path: str, dry_run=False) -> bool:
    if not os.path.exists(path):
        return False
    if dry_run:
        print(f"  Would remove: {path}")
        return True
    shutil.rmtree(path)
    print(f"  Removed: {path}")
    return True


def format_elapsed(elapsed: float) -> str:
    if elapsed < 60:
        return f"{elapsed:.2f} seconds"
    elif elapsed < 3600:
        minutes = int(elapsed // 60)
        seconds = elapsed % 60
        return f"{minutes} min {seconds:.1f} sec"
    hours = int(elapsed // 3600)
    minutes = int((elapsed % 3600) // 60)
    seconds = elapsed % 60
    return f"{hours} hr {minutes} min {seconds:.0f} sec"


def print_build_time(start_time: float):
    print(f"\n⏱ Build completed in {format_elapsed(time.time() - start_time)}")
