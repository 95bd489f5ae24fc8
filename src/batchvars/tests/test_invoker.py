
import os

import pytest

from batchvars.cache import SnapshotCache
from batchvars.environment import MappingEnvironment
from batchvars.errors import ExecutionError, NotFoundError
from batchvars.invoker import ToolchainInvoker
from batchvars.locator import EnvironmentVariableSet, Rule, ToolchainLocator
from batchvars.settings import Settings

VS100COMNTOOLS = 'C:\\VS10\\Common7\\Tools\\'
OUTPUT = [
  'VS100COMNTOOLS=' + VS100COMNTOOLS,
  'PATH=C:\\VS10\\VC\\bin;C:\\Windows',
  'INCLUDE=C:\\VS10\\VC\\include',
]


def test_invoke_visual_studio_2010(fake_runner_class):
  runner = fake_runner_class(OUTPUT)
  environ = MappingEnvironment({'VS100COMNTOOLS': VS100COMNTOOLS, 'PATH': 'C:\\Windows'})
  snapshot = ToolchainInvoker(environ, runner).invoke('2010', 'amd64')

  script = os.path.join(VS100COMNTOOLS, '..', '..', 'VC', 'vcvarsall.bat')
  command, discard_stderr = runner.calls[0]
  assert command.startswith('"{}" amd64 && set > "'.format(script))
  assert discard_stderr is False
  assert snapshot[1] == ('PATH', 'C:\\VS10\\VC\\bin;C:\\Windows')
  assert environ['PATH'] == 'C:\\VS10\\VC\\bin;C:\\Windows'
  assert environ['INCLUDE'] == 'C:\\VS10\\VC\\include'


def test_invoke_windows_sdk(fake_runner_class):
  runner = fake_runner_class(['TARGET_CPU=x86', 'CONFIGURATION=Debug'])
  environ = MappingEnvironment({'ProgramFiles': 'C:\\Program Files'})
  ToolchainInvoker(environ, runner).invoke('WindowsSDK7.1', 'x86', 'debug')
  command, discard_stderr = runner.calls[0]
  assert '" /debug /x86 && set > "' in command
  assert discard_stderr is True
  assert environ['TARGET_CPU'] == 'x86'


def test_invoke_detects_version(fake_runner_class):
  runner = fake_runner_class(OUTPUT)
  environ = MappingEnvironment({'VS100COMNTOOLS': VS100COMNTOOLS})
  locator = ToolchainLocator([Rule('2010', EnvironmentVariableSet('VS100COMNTOOLS'))], environ)
  ToolchainInvoker(environ, runner, locator).invoke(arch='x86')
  assert ' x86 && set > ' in runner.calls[0][0]


def test_invoke_nothing_installed(fake_runner_class):
  runner = fake_runner_class(OUTPUT)
  locator = ToolchainLocator([Rule('2010', EnvironmentVariableSet('VS100COMNTOOLS'))],
    MappingEnvironment())
  with pytest.raises(NotFoundError):
    ToolchainInvoker(MappingEnvironment(), runner, locator).invoke()
  assert runner.calls == []


def test_invoke_failing_script_leaves_environment(fake_runner_class):
  runner = fake_runner_class(OUTPUT, returncode=1)
  environ = MappingEnvironment({'VS100COMNTOOLS': VS100COMNTOOLS})
  with pytest.raises(ExecutionError):
    ToolchainInvoker(environ, runner).invoke('2010', 'amd64')
  assert environ.as_dict() == {'VS100COMNTOOLS': VS100COMNTOOLS}


def test_invoke_uses_cache(fake_runner_class, tmp_path):
  cache = SnapshotCache.from_file(str(tmp_path / 'cache.json'))
  runner = fake_runner_class(OUTPUT)

  environ = MappingEnvironment({'VS100COMNTOOLS': VS100COMNTOOLS})
  ToolchainInvoker(environ, runner, cache=cache).invoke('2010', 'amd64')
  assert len(runner.calls) == 1

  environ = MappingEnvironment({'VS100COMNTOOLS': VS100COMNTOOLS})
  ToolchainInvoker(environ, runner, cache=cache).invoke('2010', 'amd64')
  assert len(runner.calls) == 1
  assert environ['INCLUDE'] == 'C:\\VS10\\VC\\include'

  ToolchainInvoker(environ, runner, cache=cache).invoke('2010', 'x86')
  assert len(runner.calls) == 2


def test_cache_keeps_unrelated_variables_of_caller(fake_runner_class, tmp_path):
  cache = SnapshotCache.from_file(str(tmp_path / 'cache.json'))
  runner = fake_runner_class(OUTPUT + ['FOO=old'])

  environ = MappingEnvironment({'VS100COMNTOOLS': VS100COMNTOOLS, 'FOO': 'old'})
  invoker = ToolchainInvoker(environ, runner, cache=cache)
  invoker.invoke('2010', 'amd64')
  assert cache.get(invoker.resolve('2010', 'amd64').cache_key) == [
    ('PATH', 'C:\\VS10\\VC\\bin;C:\\Windows'),
    ('INCLUDE', 'C:\\VS10\\VC\\include'),
  ]

  environ = MappingEnvironment({'VS100COMNTOOLS': VS100COMNTOOLS, 'FOO': 'new'})
  ToolchainInvoker(environ, runner, cache=cache).invoke('2010', 'amd64')
  assert len(runner.calls) == 1
  assert environ['FOO'] == 'new'
  assert environ['INCLUDE'] == 'C:\\VS10\\VC\\include'


def test_from_settings(fake_runner_class, tmp_path):
  settings = Settings.of({
    'batchvars.strict': 'false',
    'batchvars.cache': 'yes',
    'batchvars.cache_file': str(tmp_path / 'cache.json'),
  })
  invoker = ToolchainInvoker.from_settings(settings, MappingEnvironment(), fake_runner_class())
  assert invoker.strict is False
  assert invoker.cache is not None


def test_runner_type_is_checked():
  with pytest.raises(TypeError):
    ToolchainInvoker(MappingEnvironment(), runner=object())
