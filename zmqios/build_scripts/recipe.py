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
Library recipes and the text patches they carry.
"""

import os
import re
import shutil
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from zmqios.build_scripts.errors import PatchError

PATCH_BACKUP_SUFFIX = ".original"


@dataclass(frozen=True)
class TextPatch:
    """
    An in-place edit of one file of the source tree.

    kind "regex": replace `pattern` with `replacement`, first match per line
    (every match on a line when `global_replace` is set).
    kind "line_prefix": prepend `replacement` to lines `line_range`
    (1-based, inclusive).
    """
    path: str
    kind: str = "regex"
    pattern: str = ""
    replacement: str = ""
    line_range: Tuple[int, int] = (0, 0)
    global_replace: bool = False
    required: bool = True
    description: str = ""

    def transform(self, content: str) -> Tuple[str, int]:
        """Return the patched content and the number of lines changed."""
        lines = content.splitlines(keepends=True)
        changed = 0
        if self.kind == "line_prefix":
            first, last = self.line_range
            if first < 1 or first > last:
                raise PatchError(f"Invalid line range {self.line_range} for {self.path}")
            for index in range(first - 1, min(last, len(lines))):
                lines[index] = self.replacement + lines[index]
                changed += 1
        elif self.kind == "regex":
            regex = re.compile(self.pattern)
            count = 0 if self.global_replace else 1
            for index, line in enumerate(lines):
                new_line, n = regex.subn(self.replacement, line, count=count)
                if n:
                    lines[index] = new_line
                    changed += 1
        else:
            raise PatchError(f"Unknown patch kind '{self.kind}' for {self.path}")
        return "".join(lines), changed

    def apply(self, source_dir: str) -> int:
        """
        Patch the file in place, keeping a `.original` copy beside it.

        Raises:
            PatchError: If the file is missing, or a required patch changed
                nothing
        """
        file_path = os.path.join(source_dir, self.path)
        if not os.path.isfile(file_path):
            raise PatchError(f"Patch target not found: {file_path}")

        with open(file_path, "r", encoding="utf-8", errors="surrogateescape") as f:
            content = f.read()
        patched, changed = self.transform(content)
        if changed == 0:
            if self.required:
                raise PatchError(
                    f"Patch '{self.description or self.pattern}' matched nothing in {file_path}"
                )
            print(f"   ⚠️  Warning: patch matched nothing in {file_path}")
            return 0

        shutil.copyfile(file_path, file_path + PATCH_BACKUP_SUFFIX)
        with open(file_path, "w", encoding="utf-8", errors="surrogateescape") as f:
            f.write(patched)
        return changed


def apply_patches(source_dir: str, patches: List[TextPatch]) -> int:
    """Apply `patches` in order. Returns the total number of changed lines."""
    total = 0
    for patch in patches:
        if patch.description:
            print(f"Patching {patch.path}: {patch.description}")
        total += patch.apply(source_dir)
    return total


# clock_gettime is only available on iOS 10+
def disable_clock_gettime_patch(config_header: str) -> TextPatch:
    return TextPatch(
        path=config_header,
        pattern=r"#define HAVE_CLOCK_GETTIME 1",
        replacement="/* #undef HAVE_CLOCK_GETTIME */",
        global_replace=True,
        required=False,
        description="disable clock_gettime",
    )


@dataclass(frozen=True)
class LibraryRecipe:
    """How to fetch, patch and configure one upstream library."""
    name: str
    libname: str
    source_dir_name: str
    head_url: str
    extracted_glob: str
    stable_url: str = ""
    stable_extracted_name: str = ""
    keep_subdir: str = ""
    default_branch: str = "master"
    source_patches: Tuple[TextPatch, ...] = ()
    post_configure_patch: Optional[TextPatch] = None
    configure_args: Tuple[str, ...] = ()
    run_autoreconf: bool = True
    min_versions: Dict[str, str] = field(default_factory=dict)
    output_dir: str = "."

    @property
    def supports_stable(self) -> bool:
        return bool(self.stable_url)

    def head_tarball_url(self, branch: Optional[str] = None) -> str:
        return self.head_url.format(branch=branch or self.default_branch)

    def stable_tarball_url(self, version: str) -> str:
        return self.stable_url.format(version=version)
