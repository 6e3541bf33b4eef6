#!/usr/bin/env python3
"""
Tests for text patches and library recipes.

Run with: python3 -m pytest zmqios/build_scripts/test_recipe.py
"""

import os
import tempfile
import unittest

from zmqios.build_scripts.build_libpgm import LIBPGM_RECIPE, LIBPGM_SOURCE_PATCHES
from zmqios.build_scripts.build_libzmq import LIBZMQ_RECIPE
from zmqios.build_scripts.errors import PatchError
from zmqios.build_scripts.recipe import (
    TextPatch,
    apply_patches,
    disable_clock_gettime_patch,
)


class PatchTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.source_dir = self.tmp.name

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, rel_path, content):
        path = os.path.join(self.source_dir, rel_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(content)
        return path

    def read(self, rel_path):
        with open(os.path.join(self.source_dir, rel_path)) as f:
            return f.read()


class TestTextPatch(PatchTestCase):
    """Test applying single patches."""

    def test_regex_first_match_per_line(self):
        self.write("a.c", "x x\nx\ny\n")
        changed = TextPatch(path="a.c", pattern="x", replacement="z").apply(self.source_dir)

        self.assertEqual(changed, 2)
        self.assertEqual(self.read("a.c"), "z x\nz\ny\n")

    def test_regex_global(self):
        self.write("a.c", "x x\n")
        TextPatch(path="a.c", pattern="x", replacement="z", global_replace=True).apply(self.source_dir)

        self.assertEqual(self.read("a.c"), "z z\n")

    def test_backup_is_kept(self):
        self.write("a.c", "x\n")
        TextPatch(path="a.c", pattern="x", replacement="z").apply(self.source_dir)

        self.assertEqual(self.read("a.c.original"), "x\n")

    def test_line_prefix_range(self):
        self.write("in.h", "".join(f"line{i}\n" for i in range(1, 6)))
        changed = TextPatch(path="in.h", kind="line_prefix", replacement="// ",
                            line_range=(2, 4)).apply(self.source_dir)

        self.assertEqual(changed, 3)
        self.assertEqual(self.read("in.h"), "line1\n// line2\n// line3\n// line4\nline5\n")

    def test_line_prefix_past_end_of_file(self):
        self.write("in.h", "a\nb\n")
        changed = TextPatch(path="in.h", kind="line_prefix", replacement="// ",
                            line_range=(2, 10)).apply(self.source_dir)

        self.assertEqual(changed, 1)
        self.assertEqual(self.read("in.h"), "a\n// b\n")

    def test_line_prefix_default_range_fails(self):
        self.write("in.h", "a\nb\n")

        with self.assertRaises(PatchError):
            TextPatch(path="in.h", kind="line_prefix", replacement="// ").apply(self.source_dir)
        self.assertEqual(self.read("in.h"), "a\nb\n")

    def test_line_prefix_reversed_range_fails(self):
        self.write("in.h", "a\nb\nc\n")

        with self.assertRaises(PatchError):
            TextPatch(path="in.h", kind="line_prefix", replacement="// ",
                      line_range=(3, 1)).apply(self.source_dir)

    def test_required_patch_without_match_fails(self):
        self.write("a.c", "y\n")

        with self.assertRaises(PatchError):
            TextPatch(path="a.c", pattern="x", replacement="z").apply(self.source_dir)
        self.assertFalse(os.path.exists(os.path.join(self.source_dir, "a.c.original")))

    def test_required_patch_missing_file_fails(self):
        with self.assertRaises(PatchError):
            TextPatch(path="missing.c", pattern="x", replacement="z").apply(self.source_dir)

    def test_optional_patch_without_match_is_skipped(self):
        self.write("a.c", "y\n")
        changed = TextPatch(path="a.c", pattern="x", replacement="z", required=False).apply(self.source_dir)

        self.assertEqual(changed, 0)
        self.assertEqual(self.read("a.c"), "y\n")

    def test_optional_patch_missing_file_fails(self):
        with self.assertRaises(PatchError):
            disable_clock_gettime_patch("src/platform.hpp").apply(self.source_dir)

    def test_unknown_kind(self):
        self.write("a.c", "x\n")
        with self.assertRaises(PatchError):
            TextPatch(path="a.c", kind="sed").apply(self.source_dir)

    def test_disable_clock_gettime(self):
        self.write("src/platform.hpp", "#define HAVE_CLOCK_GETTIME 1\n#define HAVE_FORK 1\n")
        disable_clock_gettime_patch("src/platform.hpp").apply(self.source_dir)

        self.assertEqual(
            self.read("src/platform.hpp"),
            "/* #undef HAVE_CLOCK_GETTIME */\n#define HAVE_FORK 1\n",
        )


class TestLibpgmPatches(PatchTestCase):
    """Test the OpenPGM source patches against representative files."""

    def test_source_patches(self):
        self.write("configure.ac", "AC_INIT([openpgm])\nAC_CHECK_FILES([/proc/cpuinfo])\n")
        self.write("include/pgm/in.h", "".join(f"/* {i} */\n" for i in range(1, 61)))
        self.write("cpu.c", "#ifndef _MSC_VER\n__asm__ volatile (\"cpuid\");\n#endif\n")

        apply_patches(self.source_dir, list(LIBPGM_SOURCE_PATCHES))

        self.assertIn("# AC_CHECK_FILES([/proc/cpuinfo])", self.read("configure.ac"))
        in_h = self.read("include/pgm/in.h").splitlines()
        self.assertEqual(in_h[37], "/* 38 */")
        self.assertEqual(in_h[38], "// /* 39 */")
        self.assertEqual(in_h[49], "// /* 50 */")
        self.assertEqual(in_h[50], "/* 51 */")
        self.assertTrue(self.read("cpu.c").startswith("#if defined(__i386__) || defined(__x86_64__)\n"))


class TestRecipes(unittest.TestCase):
    """Test the library recipe URLs."""

    def test_libzmq_urls(self):
        self.assertEqual(LIBZMQ_RECIPE.head_tarball_url(), "https://github.com/zeromq/libzmq/tarball/master")
        self.assertEqual(
            LIBZMQ_RECIPE.stable_tarball_url("4.3.5"),
            "https://github.com/zeromq/libzmq/releases/download/v4.3.5/zeromq-4.3.5.tar.gz",
        )
        self.assertTrue(LIBZMQ_RECIPE.supports_stable)

    def test_libpgm_urls(self):
        self.assertEqual(LIBPGM_RECIPE.head_tarball_url("release-5-3-128"),
                         "https://github.com/steve-o/openpgm/tarball/release-5-3-128")
        self.assertFalse(LIBPGM_RECIPE.supports_stable)
        self.assertEqual(LIBPGM_RECIPE.min_versions["iOS"], "9.0")


if __name__ == "__main__":
    unittest.main()
