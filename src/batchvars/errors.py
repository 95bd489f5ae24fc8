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

import typing as t


class BatchvarsError(Exception):
  pass


class ConfigurationError(BatchvarsError):
  """
  Raised for an unknown toolchain version, architecture or configuration token, or an invalid
  setting. Always raised before any external process is started.
  """


class NotFoundError(BatchvarsError):
  """
  Raised when no installed toolchain matches. #versions lists the versions that were checked.
  """

  def __init__(self, versions: t.Sequence[str]) -> None:
    super().__init__(list(versions))
    self.versions = list(versions)

  def __str__(self) -> str:
    return 'no toolchain installation found (checked: {})'.format(', '.join(self.versions))


class ExecutionError(BatchvarsError):
  """
  Raised when the toolchain setup script exits with a non-zero exit code.
  """

  def __init__(self, command: str, returncode: int) -> None:
    super().__init__(command, returncode)
    self.command = command
    self.returncode = returncode

  def __str__(self) -> str:
    return '{0!r} exited with non-zero exit-code {1}'.format(self.command, self.returncode)
