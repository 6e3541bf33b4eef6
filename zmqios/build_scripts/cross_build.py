#!/usr/bin/env python3
# -- coding: utf-8 --
#
# cross_build.py
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
Autotools cross build of one platform/architecture pair.

configure and make run in place inside the shared source directory, so
two architectures must never build at the same time.
"""

import os
from dataclasses import dataclass
from typing import Callable, Optional

from zmqios.build_scripts.errors import CommandError
from zmqios.build_scripts.platforms import ArchitectureBuildConfig
from zmqios.build_scripts.recipe import LibraryRecipe
from zmqios.utils.cmd.cmd_util import run_command

DEFAULT_JOBS = 8

RunFn = Callable[..., int]


@dataclass(frozen=True)
class BuildArtifact:
    platform: str
    arch: str
    path: str


def check_call(command, runner: RunFn = run_command, cwd=None, env=None):
    """Run `command` and raise CommandError unless it exits with 0."""
    try:
        ret = runner(command, cwd=cwd, env=env)
    except OSError as e:
        raise CommandError(command, 127) from e
    if ret != 0:
        raise CommandError(command, ret)


class CrossBuildRunner:
    def __init__(self, recipe: LibraryRecipe, source_dir: str, build_dir: str,
                 jobs: int = DEFAULT_JOBS, runner: Optional[RunFn] = None):
        self.recipe = recipe
        self.source_dir = source_dir
        self.build_dir = build_dir
        self.jobs = jobs if jobs and jobs > 0 else DEFAULT_JOBS
        self.runner = runner or run_command

    def arch_prefix(self, config: ArchitectureBuildConfig) -> str:
        return os.path.abspath(os.path.join(self.build_dir, config.build_type))

    def configure_command(self, config: ArchitectureBuildConfig) -> list:
        return [
            "./configure",
            f"--prefix={self.arch_prefix(config)}",
            "--disable-shared",
            "--enable-static",
            f"--host={config.host}",
        ] + list(self.recipe.configure_args)

    def build_arch(self, config: ArchitectureBuildConfig) -> BuildArtifact:
        """
        Configure, build and install the library for one architecture.

        Returns:
            BuildArtifact: The installed static library

        Raises:
            CommandError: On the first failing step
        """
        build_type = config.build_type
        print(f"Building {build_type}...")
        prefix = self.arch_prefix(config)
        os.makedirs(prefix, exist_ok=True)
        env = config.environ()

        print(f"Configuring for {build_type}...")
        check_call(self.configure_command(config), self.runner, cwd=self.source_dir, env=env)

        if self.recipe.post_configure_patch is not None:
            self.recipe.post_configure_patch.apply(self.source_dir)

        print(f"Building for {build_type}...")
        check_call(["make", "clean"], self.runner, cwd=self.source_dir, env=env)
        check_call(["make", f"-j{self.jobs}", "V=0"], self.runner, cwd=self.source_dir, env=env)
        check_call(["make", "install"], self.runner, cwd=self.source_dir, env=env)

        return BuildArtifact(
            platform=config.platform,
            arch=config.arch,
            path=os.path.join(prefix, "lib", self.recipe.libname),
        )
