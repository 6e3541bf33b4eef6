#!/usr/bin/env python3
"""
Tests for the single-architecture cross build.

Run with: python3 -m pytest zmqios/build_scripts/test_cross_build.py
"""

import os
import tempfile
import unittest
from unittest.mock import Mock

from zmqios.build_scripts.build_libzmq import LIBZMQ_RECIPE
from zmqios.build_scripts.cross_build import CrossBuildRunner, check_call
from zmqios.build_scripts.errors import CommandError
from zmqios.build_scripts.platforms import lookup


class TestCheckCall(unittest.TestCase):
    def test_success(self):
        runner = Mock(return_value=0)
        check_call(["make"], runner, cwd="/src", env={"A": "1"})
        runner.assert_called_once_with(["make"], cwd="/src", env={"A": "1"})

    def test_non_zero_exit(self):
        with self.assertRaises(CommandError) as context:
            check_call(["make", "install"], Mock(return_value=2))

        self.assertEqual(context.exception.returncode, 2)
        self.assertEqual(context.exception.command, "make install")

    def test_missing_executable(self):
        with self.assertRaises(CommandError) as context:
            check_call(["./configure"], Mock(side_effect=FileNotFoundError("./configure")))

        self.assertEqual(context.exception.returncode, 127)


class TestCrossBuildRunner(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.source_dir = os.path.join(self.tmp.name, "zeromq")
        self.build_dir = os.path.join(self.tmp.name, "build")
        os.makedirs(os.path.join(self.source_dir, "src"))
        with open(os.path.join(self.source_dir, "src", "platform.hpp"), "w") as f:
            f.write("#define HAVE_CLOCK_GETTIME 1\n")

    def tearDown(self):
        self.tmp.cleanup()

    def test_build_arch(self):
        runner = Mock(return_value=0)
        config = lookup("tvOS", "arm64", "17.0", "/Developer")

        artifact = CrossBuildRunner(LIBZMQ_RECIPE, self.source_dir, self.build_dir,
                                    runner=runner).build_arch(config)

        prefix = os.path.join(self.build_dir, "tvOS-arm64")
        self.assertTrue(os.path.isdir(prefix))
        self.assertEqual(artifact.path, os.path.join(prefix, "lib", "libzmq.a"))
        self.assertEqual((artifact.platform, artifact.arch), ("tvOS", "arm64"))
        commands = [call.args[0] for call in runner.call_args_list]
        self.assertEqual(commands[1:], [["make", "clean"], ["make", "-j8", "V=0"], ["make", "install"]])
        for call in runner.call_args_list:
            self.assertEqual(call.kwargs["cwd"], self.source_dir)
            self.assertEqual(call.kwargs["env"]["ISDKROOT"], config.sdk_root)

    def test_make_failure_stops_build(self):
        runner = Mock(side_effect=lambda command, cwd=None, env=None: 2 if command[-1] == "V=0" else 0)
        config = lookup("macOS", "x86_64", "14.0", "/Developer")

        with self.assertRaises(CommandError):
            CrossBuildRunner(LIBZMQ_RECIPE, self.source_dir, self.build_dir,
                             runner=runner).build_arch(config)

        self.assertNotIn(["make", "install"], [call.args[0] for call in runner.call_args_list])

    def test_invalid_jobs_fall_back_to_default(self):
        self.assertEqual(CrossBuildRunner(LIBZMQ_RECIPE, self.source_dir, self.build_dir, jobs=0).jobs, 8)


if __name__ == "__main__":
    unittest.main()
