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

"""Build scripts for the Apple platform libraries."""

__all__ = [
    "assemble",
    "build_libpgm",
    "build_libzmq",
    "build_utils",
    "cross_build",
    "errors",
    "fetch",
    "pipeline",
    "platforms",
    "recipe",
    "sdk",
]
