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
The known Visual Studio and Windows SDK toolchains, how to detect them and how to build the
invocation of their environment setup script.
"""

import os
import platform
import typing as t
from dataclasses import dataclass

from batchvars.environment import IEnvironment
from batchvars.errors import NotFoundError
from batchvars.locator import AllOf, EnvironmentVariableSet, FileExists, Rule
from batchvars.util.preconditions import check_choice

WINDOWS_SDK = 'WindowsSDK7.1'
DEFAULT_PROGRAM_FILES = 'C:\\Program Files'

ARCHITECTURES = ('amd64', 'x86')
CONFIGURATIONS = ('release', 'debug')

_SDK_ARCH_FLAGS = {'amd64': '/x64', 'x86': '/x86'}
_SDK_CONFIGURATION_FLAGS = {'release': '/release', 'debug': '/debug'}


@dataclass(frozen=True)
class Toolchain:
  """
  Static information about a toolchain version. The base directory is read from the
  environment variable *base_variable*, or is the fixed *base_path* (which may reference
  environment variables as `%NAME%`).
  """

  version: str
  script_suffix: t.Tuple[str, ...]
  base_variable: t.Optional[str] = None
  base_path: t.Optional[str] = None
  discard_stderr: bool = False

  @property
  def is_sdk(self) -> bool:
    return self.version == WINDOWS_SDK


#: All supported toolchains in order of preference.
TOOLCHAINS: t.Tuple[Toolchain, ...] = (
  Toolchain(WINDOWS_SDK, ('Bin', 'SetEnv.cmd'),
    base_path='%ProgramFiles%\\Microsoft SDKs\\Windows\\v7.1', discard_stderr=True),
  Toolchain('2015', ('..', '..', 'VC', 'vcvarsall.bat'), base_variable='VS140COMNTOOLS'),
  Toolchain('2013', ('..', '..', 'VC', 'vcvarsall.bat'), base_variable='VS120COMNTOOLS'),
  Toolchain('2012', ('..', '..', 'VC', 'vcvarsall.bat'), base_variable='VS110COMNTOOLS'),
  Toolchain('2010', ('..', '..', 'VC', 'vcvarsall.bat'), base_variable='VS100COMNTOOLS'),
  Toolchain('2008', ('..', '..', 'VC', 'vcvarsall.bat'), base_variable='VS90COMNTOOLS'),
)

VERSIONS = tuple(x.version for x in TOOLCHAINS)


@dataclass(frozen=True)
class ToolchainDescriptor:
  version: str
  base_path: str
  arch: str
  configuration: str


@dataclass(frozen=True)
class ToolchainInvocation:
  """
  A fully resolved call of a toolchain setup script.
  """

  descriptor: ToolchainDescriptor
  script: str
  arguments: str
  discard_stderr: bool

  @property
  def cache_key(self) -> str:
    return '{}|{}|{}'.format(self.descriptor.version, self.script, self.arguments)


def get_toolchain(version: str) -> Toolchain:
  check_choice(version, VERSIONS, 'toolchain version')
  return next(x for x in TOOLCHAINS if x.version == version)


def get_host_arch() -> str:
  """
  Returns the architecture token that matches the current host, either `amd64` or `x86`.
  """

  arch = platform.machine().lower()
  if arch in ('amd64', 'x86_64'):
    return 'amd64'
  return 'x86'


def _expand_base_path(template: str, environ: IEnvironment) -> str:
  program_files = environ.get('ProgramFiles') or DEFAULT_PROGRAM_FILES
  return template.replace('%ProgramFiles%', program_files)


def resolve_toolchain(
  version: str,
  arch: str,
  configuration: str,
  environ: IEnvironment,
) -> ToolchainInvocation:
  """
  Resolves the setup script path and its arguments for the toolchain *version*.

  For the Windows SDK, *arch* and *configuration* are translated to the flags of `SetEnv.cmd`
  and must be one of #ARCHITECTURES and #CONFIGURATIONS. For Visual Studio versions, *arch* is
  passed to `vcvarsall.bat` as is.

  :raise ConfigurationError: If *version* is unknown or a token can not be translated.
  :raise NotFoundError: If the base directory of a Visual Studio version is not set.
  """

  toolchain = get_toolchain(version)

  if toolchain.is_sdk:
    check_choice(arch, ARCHITECTURES, 'architecture')
    check_choice(configuration, CONFIGURATIONS, 'configuration')
    arguments = '{} {}'.format(_SDK_CONFIGURATION_FLAGS[configuration], _SDK_ARCH_FLAGS[arch])
  else:
    arguments = arch

  if toolchain.base_variable:
    base_path = environ.get(toolchain.base_variable)
    if not base_path:
      raise NotFoundError([version])
  else:
    assert toolchain.base_path is not None, toolchain
    base_path = _expand_base_path(toolchain.base_path, environ)

  descriptor = ToolchainDescriptor(version, base_path, arch, configuration)
  return ToolchainInvocation(
    descriptor=descriptor,
    script=os.path.join(base_path, *toolchain.script_suffix),
    arguments=arguments,
    discard_stderr=toolchain.discard_stderr)


def default_rules() -> t.List[Rule]:
  """
  Returns the detection rules for all #TOOLCHAINS in order of preference.
  """

  rules = []
  for toolchain in TOOLCHAINS:
    if toolchain.base_variable:
      script = '%{}%'.format(toolchain.base_variable) + '\\'.join(('',) + toolchain.script_suffix)
      predicate = AllOf(EnvironmentVariableSet(toolchain.base_variable), FileExists(script))
    else:
      assert toolchain.base_path is not None, toolchain
      script = '\\'.join((toolchain.base_path,) + toolchain.script_suffix)
      predicate = AllOf(EnvironmentVariableSet('ProgramFiles'), FileExists(script))
    rules.append(Rule(toolchain.version, predicate))
  return rules
