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

"""Exceptions raised by the build scripts. All of them abort the run."""


class BuildError(Exception):
    """Base class for every fatal build failure"""
    pass


class ConfigError(BuildError):
    """Raised when zmqios.toml cannot be parsed or holds invalid values"""
    pass


class SdkDiscoveryError(BuildError):
    """Raised when the Xcode toolchain cannot be queried"""
    pass


class SourceFetchError(BuildError):
    """Raised when downloading, extracting or renaming a source tree fails"""
    pass


class PatchError(BuildError):
    """Raised when a required text patch has nothing to apply to"""
    pass


class UnsupportedTargetError(BuildError):
    """Raised for a platform/architecture pair missing from the matrix"""

    def __init__(self, build_type: str):
        super().__init__(f"Unsupported platform/architecture {build_type}")
        self.build_type = build_type


class CommandError(BuildError):
    """Raised when an external tool exits with a non-zero code"""

    def __init__(self, command, returncode: int):
        if isinstance(command, (list, tuple)):
            command = " ".join(str(x) for x in command)
        super().__init__(f"Command failed ({returncode}): {command}")
        self.command = command
        self.returncode = returncode


class AssemblyError(BuildError):
    """Raised when a per-architecture library is missing or empty"""
    pass
