#!/usr/bin/env python3
# -- coding: utf-8 --
#
# pipeline.py
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
Sequential build of one library for every installed Apple platform.

    Init -> SdkDiscovered -> SourceFetched -> Building* -> Assembling*
         -> Cleaned -> Done

Any exception moves the pipeline to Aborted and is re-raised; the caller
turns it into exit code 1.
"""

import os
import shutil
import time
from typing import Callable, Dict, List, Optional

from zmqios.build_scripts import sdk as sdk_discovery
from zmqios.build_scripts import platforms as platform_matrix
from zmqios.build_scripts.assemble import DistributionBundle, assemble
from zmqios.build_scripts.build_utils import (
    BUILD_DIR_NAME,
    DIST_DIR_NAME,
    default_config,
    print_build_time,
    reset_dir,
)
from zmqios.build_scripts.cross_build import BuildArtifact, CrossBuildRunner, RunFn, check_call
from zmqios.build_scripts.fetch import fetch_source
from zmqios.build_scripts.recipe import LibraryRecipe, apply_patches
from zmqios.utils.cmd.cmd_util import run_command

STATE_INIT = "Init"
STATE_SDK_DISCOVERED = "SdkDiscovered"
STATE_SOURCE_FETCHED = "SourceFetched"
STATE_BUILDING = "Building"
STATE_ASSEMBLING = "Assembling"
STATE_CLEANED = "Cleaned"
STATE_DONE = "Done"
STATE_ABORTED = "Aborted"


class BuildPipeline:
    def __init__(
        self,
        recipe: LibraryRecipe,
        output_dir: str,
        config: Optional[dict] = None,
        branch: Optional[str] = None,
        version: Optional[str] = None,
        only_platforms: Optional[List[str]] = None,
        skip_platforms: Optional[List[str]] = None,
        keep_build: Optional[bool] = None,
        jobs: Optional[int] = None,
        runner: Optional[RunFn] = None,
        discover: Optional[Callable[[], sdk_discovery.Toolchain]] = None,
        fetcher: Optional[Callable[..., str]] = None,
    ):
        self.recipe = recipe
        self.config = config or default_config()
        lib_config = self.config.get("LIBRARIES", {}).get(recipe.name, {})

        self.output_dir = os.path.abspath(output_dir)
        self.build_dir = os.path.join(self.output_dir, BUILD_DIR_NAME)
        self.dist_dir = os.path.join(self.output_dir, DIST_DIR_NAME)
        self.branch = branch or lib_config.get("branch") or recipe.default_branch
        self.version = version if version is not None else lib_config.get("version") or None
        if self.version and not recipe.supports_stable:
            print(f"   ⚠️  Warning: {recipe.name} has no stable releases, ignoring version {self.version}")
            self.version = None
        self.min_versions = dict(recipe.min_versions)
        self.min_versions.update(lib_config.get("min_versions", {}))
        self.only_platforms = only_platforms
        self.skip_platforms = skip_platforms or []
        self.keep_build = self.config["KEEP_BUILD"] if keep_build is None else keep_build
        self.jobs = jobs or self.config["JOBS"]
        self.runner = runner or run_command
        self.discover = discover or sdk_discovery.discover_toolchain
        self.fetcher = fetcher or fetch_source

        self.state = STATE_INIT
        self.toolchain = None
        self.platforms: List[str] = []
        self.libs_per_platform: Dict[str, List[BuildArtifact]] = {}
        self.bundles: List[DistributionBundle] = []

    def archs_for(self, platform: str) -> List[str]:
        return list(self.config["PLATFORM_ARCHS"].get(platform, []))

    def select_platforms(self, sdk_versions: Dict[str, str]) -> List[str]:
        """Platforms with an installed SDK, narrowed by --platforms/--skip-platforms."""
        selected = list(sdk_versions.keys())
        if self.only_platforms:
            wanted = {p.lower() for p in self.only_platforms}
            selected = [p for p in selected if p.lower() in wanted]
        if self.skip_platforms:
            skipped = {p.lower() for p in self.skip_platforms}
            selected = [p for p in selected if p.lower() not in skipped]
        return selected

    def prepare_source(self) -> str:
        source_dir = self.fetcher(
            self.recipe, self.build_dir, branch=self.branch, version=self.version
        )
        apply_patches(source_dir, list(self.recipe.source_patches))
        # Release tarballs ship a generated configure script
        if self.recipe.run_autoreconf and not self.version:
            os.makedirs(os.path.join(source_dir, "m4"), exist_ok=True)
            check_call(["autoreconf", "--install"], self.runner, cwd=source_dir)
        return source_dir

    def build_all(self, source_dir: str):
        runner = CrossBuildRunner(
            self.recipe, source_dir, self.build_dir, jobs=self.jobs, runner=self.runner
        )
        for platform in self.platforms:
            self.libs_per_platform.setdefault(platform, [])
            for arch in self.archs_for(platform):
                self.state = STATE_BUILDING
                config = platform_matrix.lookup(
                    platform,
                    arch,
                    self.toolchain.sdk_versions[platform],
                    self.toolchain.developer_dir,
                    min_version=self.min_versions.get(platform),
                    cxxflags=self.config["CXXFLAGS"],
                    other_cppflags=self.config["CPPFLAGS"],
                )
                artifact = runner.build_arch(config)
                self.libs_per_platform[platform].append(artifact)

    def assemble_all(self):
        for platform in self.platforms:
            self.state = STATE_ASSEMBLING
            bundle = assemble(
                platform,
                self.libs_per_platform.get(platform, []),
                self.build_dir,
                self.dist_dir,
                self.recipe.libname,
                self.archs_for(platform),
                lipo=self.toolchain.lipo,
                runner=self.runner,
            )
            if bundle is not None:
                self.bundles.append(bundle)

    def run(self) -> List[DistributionBundle]:
        start_time = time.time()
        print(f"==================build {self.recipe.name} ({self.output_dir})========================")
        try:
            self.toolchain = self.discover()
            self.platforms = self.select_platforms(self.toolchain.sdk_versions)
            self.state = STATE_SDK_DISCOVERED

            reset_dir(self.build_dir)
            reset_dir(self.dist_dir)

            source_dir = self.prepare_source()
            self.state = STATE_SOURCE_FETCHED

            self.build_all(source_dir)
            self.assemble_all()

            if not self.keep_build:
                shutil.rmtree(self.build_dir)
            self.state = STATE_CLEANED
        except BaseException:
            self.state = STATE_ABORTED
            raise

        self.state = STATE_DONE
        print_build_time(start_time)
        return self.bundles
