# The MIT License (MIT)
#
# Copyright (c) 2018 Niklas Rosenstein
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Runs a batch file and captures the environment variables after that batch file has run.
"""

import contextlib
import logging
import os
import re
import tempfile
import typing as t

from batchvars.environment import EnvironmentSnapshot
from batchvars.errors import ExecutionError
from batchvars.shell import ICommandRunner, ShellCommandRunner, capture_command

log = logging.getLogger(__name__)

#: The encoding of the file that `set` writes to, the console code page on Windows.
SET_OUTPUT_ENCODING = 'oem' if os.name == 'nt' else None

#: Matches a `name=value` line. The name ends at the first `=` and may not be empty.
ASSIGNMENT_REGEX = re.compile(r'^([^=]+)=(.*)$')


def parse_snapshot(lines: t.Iterable[str]) -> EnvironmentSnapshot:
  """
  Parses the output of the `set` command. Lines that are not assignments are skipped.
  """

  snapshot: EnvironmentSnapshot = []
  for line in lines:
    line = line.rstrip('\r\n')
    match = ASSIGNMENT_REGEX.match(line)
    if not match:
      if line:
        log.debug('skipping line %r', line)
      continue
    snapshot.append((match.group(1), match.group(2)))
  return snapshot


def capture_environment(
  script: str,
  arguments: str = '',
  discard_stderr: bool = False,
  runner: t.Optional[ICommandRunner] = None,
  strict: bool = True,
) -> EnvironmentSnapshot:
  """
  Executes *script* with *arguments* and returns the environment table that is visible after it
  completed. The table is written to a temporary file by the `set` command, which only runs if
  *script* succeeds. The file is removed before this function returns.

  :param discard_stderr: Send the error stream of *script* to the null device.
  :param runner: The command runner, defaults to a #ShellCommandRunner.
  :param strict: If enabled, a non-zero exit code raises an #ExecutionError. Otherwise, a
    warning is logged and whatever was captured is returned, usually nothing.
  """

  if runner is None:
    runner = ShellCommandRunner()

  fd, filename = tempfile.mkstemp(prefix='batchvars-', suffix='.env')
  os.close(fd)
  try:
    command = capture_command(script, arguments, filename)
    returncode = runner.run(command, discard_stderr)
    if returncode != 0:
      if strict:
        raise ExecutionError(command, returncode)
      log.warning('%r exited with non-zero exit-code %d, environment may be incomplete',
        command, returncode)
    with open(filename, 'r', encoding=SET_OUTPUT_ENCODING, errors='replace') as fp:
      snapshot = parse_snapshot(fp)
  finally:
    with contextlib.suppress(FileNotFoundError):
      os.remove(filename)

  log.debug('captured %d environment variable(s) from %r', len(snapshot), script)
  return snapshot
