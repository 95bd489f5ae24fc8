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
Building and running `cmd.exe` command lines.
"""

import abc
import logging
import subprocess as sp
import typing as t

log = logging.getLogger(__name__)


def quote(s: str) -> str:
  """
  Quotes *s* for `cmd.exe`. Unlike #shlex.quote(), which generates single quotes, this always
  produces a double-quoted string. Strings that are already double-quoted are returned as is.
  """

  if len(s) >= 2 and s[0] == s[-1] == '"':
    return s
  return '"' + s.replace('"', '\\"') + '"'


def capture_command(script: str, arguments: str, output_file: str) -> str:
  """
  Generates the command line that runs *script* with *arguments* and, only if it succeeds,
  dumps the resulting environment table into *output_file*.

  ```py
  >>> capture_command('C:/VC/vcvarsall.bat', 'amd64', 'C:/Temp/env.txt')
  '"C:/VC/vcvarsall.bat" amd64 && set > "C:/Temp/env.txt"'
  ```
  """

  parts = [quote(script)]
  if arguments:
    parts.append(arguments)
  parts += ['&&', 'set', '>', quote(output_file)]
  return ' '.join(parts)


class ICommandRunner(metaclass=abc.ABCMeta):
  """
  Runs a shell command line that may chain commands with `&&`.
  """

  @abc.abstractmethod
  def run(self, command: str, discard_stderr: bool = False) -> int:
    """
    Run *command* to completion and return its exit code. If *discard_stderr* is enabled, the
    error stream of the command is sent to the null device, otherwise it is inherited.
    """


class ShellCommandRunner(ICommandRunner):
  """
  Runs commands with #subprocess.call() and `shell=True`, which on Windows passes the command
  line to `cmd.exe /c`.
  """

  def run(self, command: str, discard_stderr: bool = False) -> int:
    log.debug('$ %s', command)
    stderr = sp.DEVNULL if discard_stderr else None
    return sp.call(command, shell=True, stderr=stderr)
