#!/usr/bin/env python3
# -- coding: utf-8 --
#
# fetch.py
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
Source tarball download and extraction.

Downloads the upstream tarball of a recipe from GitHub, unpacks it into
the build directory, gives the extracted tree its fixed name and removes
the archive. There is no partial success: any failure raises
SourceFetchError.
"""

import glob
import os
import shutil
import tarfile
from typing import Optional

import requests

from zmqios.build_scripts.errors import SourceFetchError
from zmqios.build_scripts.recipe import LibraryRecipe

DOWNLOAD_TIMEOUT_SECOND = 300
DOWNLOAD_CHUNK_SIZE = 1024 * 1024


def download_file(url: str, dst_path: str, session: Optional[requests.Session] = None) -> str:
    """Stream `url` into `dst_path`, following redirects."""
    http = session or requests
    try:
        with http.get(url, stream=True, allow_redirects=True, timeout=DOWNLOAD_TIMEOUT_SECOND) as response:
            response.raise_for_status()
            with open(dst_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
    except (requests.RequestException, OSError) as e:
        raise SourceFetchError(f"Failed to download {url}: {e}") from e
    return dst_path


def extract_tarball(archive_path: str, dst_dir: str):
    """Extract a tarball of any compression into `dst_dir`."""
    try:
        with tarfile.open(archive_path, "r:*") as tar:
            if hasattr(tarfile, "data_filter"):
                tar.extractall(path=dst_dir, filter="data")
            else:
                tar.extractall(path=dst_dir)
    except (tarfile.TarError, OSError) as e:
        raise SourceFetchError(f"Failed to extract {archive_path}: {e}") from e


def _find_extracted_dir(build_dir: str, pattern: str) -> str:
    matches = [p for p in glob.glob(os.path.join(build_dir, pattern)) if os.path.isdir(p)]
    if len(matches) != 1:
        raise SourceFetchError(
            f"Expected one directory matching '{pattern}' in {build_dir}, found {len(matches)}"
        )
    return matches[0]


def fetch_source(
    recipe: LibraryRecipe,
    build_dir: str,
    branch: Optional[str] = None,
    version: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> str:
    """
    Download and unpack the source tree of `recipe` into `build_dir`.

    Args:
        recipe: Library to fetch
        build_dir: Scratch directory, must exist
        branch: Branch for a head build, defaults to the recipe's branch
        version: Release version for a stable build (e.g. "4.3.5")
        session: Optional requests session

    Returns:
        str: Path of the normalized source directory
    """
    if version:
        if not recipe.supports_stable:
            raise SourceFetchError(f"{recipe.name} has no stable release downloads")
        print(f"Downloading stable release {version} of '{recipe.name}'")
        url = recipe.stable_tarball_url(version)
        pattern = recipe.stable_extracted_name.format(version=version)
    else:
        branch = branch or recipe.default_branch
        print(f"Downloading {branch} branch of '{recipe.name}'")
        url = recipe.head_tarball_url(branch)
        pattern = recipe.extracted_glob

    archive_path = os.path.join(build_dir, os.path.basename(url))
    source_dir = os.path.join(build_dir, recipe.source_dir_name)

    download_file(url, archive_path, session=session)
    extract_tarball(archive_path, build_dir)
    extracted = _find_extracted_dir(build_dir, pattern)

    try:
        if recipe.keep_subdir:
            subdir = os.path.join(extracted, recipe.keep_subdir)
            if not os.path.isdir(subdir):
                raise SourceFetchError(f"{recipe.keep_subdir} not found in {extracted}")
            shutil.move(subdir, source_dir)
            shutil.rmtree(extracted)
        elif os.path.abspath(extracted) != os.path.abspath(source_dir):
            shutil.move(extracted, source_dir)
        os.remove(archive_path)
    except OSError as e:
        raise SourceFetchError(f"Failed to prepare {source_dir}: {e}") from e

    return source_dir
