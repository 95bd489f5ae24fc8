
import logging
import os

import pytest

from batchvars.capture import capture_environment, parse_snapshot
from batchvars.errors import ExecutionError
from batchvars.shell import ICommandRunner, capture_command


def test_parse_snapshot_preserves_embedded_equals():
  assert parse_snapshot(['FOO=a=b=c']) == [('FOO', 'a=b=c')]


def test_parse_snapshot_allows_empty_value():
  assert parse_snapshot(['EMPTY=']) == [('EMPTY', '')]


def test_parse_snapshot_skips_non_assignments():
  lines = ['', 'NOTANASSIGNMENT', 'A=1', '   ', '=C:=C:\\Windows', 'B=2']
  assert parse_snapshot(lines) == [('A', '1'), ('B', '2')]


def test_parse_snapshot_strips_line_terminators():
  assert parse_snapshot(['PATH=C:\\bin;C:\\Windows\r\n', 'X=y\n']) == [
    ('PATH', 'C:\\bin;C:\\Windows'), ('X', 'y')]


def test_parse_snapshot_keeps_order_and_case():
  lines = ['zeta=1', 'Path=C:\\', 'ALPHA=2']
  assert [k for k, _ in parse_snapshot(lines)] == ['zeta', 'Path', 'ALPHA']


def test_capture_command():
  assert capture_command('C:/VC/vcvarsall.bat', 'amd64', 'C:/Temp/x.env') == \
    '"C:/VC/vcvarsall.bat" amd64 && set > "C:/Temp/x.env"'
  assert capture_command('setenv.cmd', '', 'x.env') == '"setenv.cmd" && set > "x.env"'


def test_capture_environment(fake_runner_class):
  runner = fake_runner_class(['INCLUDE=C:\\VC\\include', '', 'LIB=C:\\VC\\lib'])
  snapshot = capture_environment('C:/VC/vcvarsall.bat', 'x86', runner=runner)
  assert snapshot == [('INCLUDE', 'C:\\VC\\include'), ('LIB', 'C:\\VC\\lib')]
  assert len(runner.calls) == 1
  command, discard_stderr = runner.calls[0]
  assert command.startswith('"C:/VC/vcvarsall.bat" x86 && set > "')
  assert discard_stderr is False


def test_capture_environment_passes_discard_stderr(fake_runner_class):
  runner = fake_runner_class(['A=1'])
  capture_environment('setenv.cmd', '/release /x64', discard_stderr=True, runner=runner)
  assert runner.calls[0][1] is True


def test_capture_environment_uses_unique_temporary_files(fake_runner_class):
  runner = fake_runner_class(['A=1'])
  capture_environment('setenv.cmd', runner=runner)
  capture_environment('setenv.cmd', runner=runner)
  assert len(set(runner.output_files)) == 2


def test_capture_environment_removes_temporary_file(fake_runner_class):
  runner = fake_runner_class(['A=1'])
  capture_environment('setenv.cmd', runner=runner)
  assert not os.path.exists(runner.output_files[0])


def test_capture_environment_raises_on_failure(fake_runner_class):
  runner = fake_runner_class(['A=1'], returncode=1)
  with pytest.raises(ExecutionError) as excinfo:
    capture_environment('vcvarsall.bat', 'ia64', runner=runner)
  assert excinfo.value.returncode == 1
  assert excinfo.value.command == runner.calls[0][0]
  assert 'exited with non-zero exit-code 1' in str(excinfo.value)
  assert not os.path.exists(runner.output_files[0])


def test_capture_environment_non_strict_returns_empty_snapshot(fake_runner_class, caplog):
  runner = fake_runner_class(['A=1'], returncode=2)
  with caplog.at_level(logging.WARNING, logger='batchvars.capture'):
    snapshot = capture_environment('vcvarsall.bat', 'amd64', runner=runner, strict=False)
  assert snapshot == []
  assert 'non-zero exit-code 2' in caplog.text
  assert not os.path.exists(runner.output_files[0])


def test_capture_environment_removes_temporary_file_if_runner_fails():
  filenames = []

  class ExplodingRunner(ICommandRunner):
    def run(self, command, discard_stderr=False):
      filenames.append(command.rpartition('> ')[2].strip('"'))
      raise OSError('cmd.exe not found')

  with pytest.raises(OSError):
    capture_environment('vcvarsall.bat', runner=ExplodingRunner())
  assert len(filenames) == 1
  assert not os.path.exists(filenames[0])


def test_capture_environment_reads_console_code_page(fake_runner_class, monkeypatch):
  monkeypatch.setattr('batchvars.capture.SET_OUTPUT_ENCODING', 'cp850')
  runner = fake_runner_class(['USERNAME=M\u00fcller'], encoding='cp850')
  assert capture_environment('setenv.cmd', runner=runner) == [('USERNAME', 'M\u00fcller')]


def test_execution_error_args(fake_runner_class):
  runner = fake_runner_class(returncode=3)
  with pytest.raises(ExecutionError) as excinfo:
    capture_environment('vcvarsall.bat', 'amd64', runner=runner)
  assert excinfo.value.args == (runner.calls[0][0], 3)
