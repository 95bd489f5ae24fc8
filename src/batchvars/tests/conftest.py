
import os
import re
import typing as t

import pytest

from batchvars.shell import ICommandRunner


class FakeCommandRunner(ICommandRunner):
  """
  Stands in for `cmd.exe`. Every call is recorded. If *returncode* is zero, the scripted
  *output* lines are written to the file that the command redirects `set` into.
  """

  def __init__(
    self,
    output: t.Sequence[str] = (),
    returncode: int = 0,
    encoding: t.Optional[str] = None,
  ) -> None:
    self.output = list(output)
    self.returncode = returncode
    self.encoding = encoding
    self.calls: t.List[t.Tuple[str, bool]] = []
    self.output_files: t.List[str] = []

  def run(self, command: str, discard_stderr: bool = False) -> int:
    self.calls.append((command, discard_stderr))
    match = re.search(r'&& set > "([^"]+)"$', command)
    assert match, command
    filename = match.group(1)
    assert os.path.isfile(filename), filename
    self.output_files.append(filename)
    if self.returncode == 0:
      with open(filename, 'w', encoding=self.encoding) as fp:
        fp.write(''.join(line + '\n' for line in self.output))
    return self.returncode


@pytest.fixture
def fake_runner_class() -> t.Type[FakeCommandRunner]:
  return FakeCommandRunner
