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

import subprocess

DEFAULT_TIMEOUT_SECOND = 60


def decode_bytes(input: bytes) -> str:
    try:
        return bytes.decode(input, "UTF-8")
    except UnicodeDecodeError:
        return bytes.decode(input, "latin-1")


def exec_command(command, timeout_second=DEFAULT_TIMEOUT_SECOND):
    """
    Run a read-only query command and capture its output.

    Args:
        command: Argument list, e.g. ["xcodebuild", "-showsdks"]
        timeout_second: Seconds to wait before the command is killed

    Returns:
        tuple: (exit_code, output_message) with stdout and stderr combined

    Raises:
        OSError: If the executable cannot be started
        subprocess.TimeoutExpired: If the command outlives the timeout
    """
    compile_popen = subprocess.run(
        command,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        timeout=timeout_second,
    )
    return compile_popen.returncode, decode_bytes(compile_popen.stdout)


def run_command(command, cwd=None, env=None):
    """
    Run a build step, streaming its output to the terminal.

    The environment is passed explicitly so that no build step ever
    inherits flags from a previous architecture.

    Returns:
        int: The exit code of the command
    """
    print(" ".join(str(x) for x in command))
    return subprocess.run(command, cwd=cwd, env=env).returncode
