#!/usr/bin/env python3
"""
Tests for source download and extraction.

Run with: python3 -m pytest zmqios/build_scripts/test_fetch.py
"""

import io
import os
import tarfile
import tempfile
import unittest
from unittest.mock import MagicMock, Mock

import requests

from zmqios.build_scripts.build_libpgm import LIBPGM_RECIPE
from zmqios.build_scripts.build_libzmq import LIBZMQ_RECIPE
from zmqios.build_scripts.errors import SourceFetchError
from zmqios.build_scripts.fetch import fetch_source


def make_tarball(files):
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in files.items():
            data = content.encode()
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def make_session(payload=b"", status_error=None, get_error=None):
    response = Mock()
    response.iter_content.return_value = [payload[:10], payload[10:]]
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    session = MagicMock()
    if get_error is not None:
        session.get.side_effect = get_error
    session.get.return_value.__enter__.return_value = response
    return session


class FetchTestCase(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.build_dir = self.tmp.name

    def tearDown(self):
        self.tmp.cleanup()


class TestFetchLibzmq(FetchTestCase):
    """Test fetching ZeroMQ."""

    def test_head_build(self):
        payload = make_tarball({"zeromq-libzmq-4a1b2c3/configure.ac": "AC_INIT\n"})
        session = make_session(payload)

        source_dir = fetch_source(LIBZMQ_RECIPE, self.build_dir, session=session)

        self.assertEqual(source_dir, os.path.join(self.build_dir, "zeromq"))
        self.assertTrue(os.path.isfile(os.path.join(source_dir, "configure.ac")))
        self.assertEqual(os.listdir(self.build_dir), ["zeromq"])
        url = session.get.call_args[0][0]
        self.assertEqual(url, "https://github.com/zeromq/libzmq/tarball/master")

    def test_head_build_custom_branch(self):
        payload = make_tarball({"zeromq-libzmq-4a1b2c3/configure.ac": "AC_INIT\n"})
        session = make_session(payload)

        fetch_source(LIBZMQ_RECIPE, self.build_dir, branch="v4.3.x", session=session)

        self.assertEqual(session.get.call_args[0][0], "https://github.com/zeromq/libzmq/tarball/v4.3.x")

    def test_stable_build(self):
        payload = make_tarball({"zeromq-4.3.5/configure": "#!/bin/sh\n"})
        session = make_session(payload)

        source_dir = fetch_source(LIBZMQ_RECIPE, self.build_dir, version="4.3.5", session=session)

        self.assertTrue(os.path.isfile(os.path.join(source_dir, "configure")))
        self.assertFalse(os.path.exists(os.path.join(self.build_dir, "zeromq-4.3.5.tar.gz")))
        self.assertEqual(
            session.get.call_args[0][0],
            "https://github.com/zeromq/libzmq/releases/download/v4.3.5/zeromq-4.3.5.tar.gz",
        )

    def test_http_error(self):
        session = make_session(status_error=requests.HTTPError("404 Client Error"))

        with self.assertRaises(SourceFetchError) as context:
            fetch_source(LIBZMQ_RECIPE, self.build_dir, session=session)

        self.assertIn("404", str(context.exception))

    def test_connection_error(self):
        session = make_session(get_error=requests.ConnectionError("no route to host"))

        with self.assertRaises(SourceFetchError):
            fetch_source(LIBZMQ_RECIPE, self.build_dir, session=session)

    def test_corrupt_archive(self):
        session = make_session(b"this is not a tarball at all")

        with self.assertRaises(SourceFetchError):
            fetch_source(LIBZMQ_RECIPE, self.build_dir, session=session)

    def test_unexpected_directory_name(self):
        payload = make_tarball({"something-else/configure.ac": "AC_INIT\n"})
        session = make_session(payload)

        with self.assertRaises(SourceFetchError):
            fetch_source(LIBZMQ_RECIPE, self.build_dir, session=session)


class TestFetchLibpgm(FetchTestCase):
    """Test fetching OpenPGM, which keeps only the pgm/ subdirectory."""

    def test_keeps_pgm_subdir(self):
        payload = make_tarball({
            "steve-o-openpgm-5f6e7d8/openpgm/pgm/configure.ac": "AC_INIT\n",
            "steve-o-openpgm-5f6e7d8/openpgm/doc/README": "docs\n",
        })
        session = make_session(payload)

        source_dir = fetch_source(LIBPGM_RECIPE, self.build_dir, session=session)

        self.assertEqual(source_dir, os.path.join(self.build_dir, "libpgm"))
        self.assertTrue(os.path.isfile(os.path.join(source_dir, "configure.ac")))
        self.assertEqual(os.listdir(self.build_dir), ["libpgm"])

    def test_missing_subdir(self):
        payload = make_tarball({"steve-o-openpgm-5f6e7d8/README": "\n"})
        session = make_session(payload)

        with self.assertRaises(SourceFetchError):
            fetch_source(LIBPGM_RECIPE, self.build_dir, session=session)

    def test_no_stable_downloads(self):
        with self.assertRaises(SourceFetchError):
            fetch_source(LIBPGM_RECIPE, self.build_dir, version="5.3.128", session=MagicMock())


if __name__ == "__main__":
    unittest.main()
