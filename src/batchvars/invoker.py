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

import logging
import typing as t

from batchvars.cache import DEFAULT_CACHE_FILE, SnapshotCache
from batchvars.capture import capture_environment
from batchvars.environment import EnvironmentSnapshot, IEnvironment, ProcessEnvironment, \
  apply_snapshot, diff_snapshot
from batchvars.locator import ToolchainLocator
from batchvars.shell import ICommandRunner, ShellCommandRunner
from batchvars.toolchains import ToolchainInvocation, default_rules, get_host_arch, \
  resolve_toolchain
from batchvars.util.preconditions import check_instance_of

if t.TYPE_CHECKING:
  from batchvars.settings import Settings

log = logging.getLogger(__name__)


class ToolchainInvoker:
  """
  Runs the setup script of a toolchain and copies the environment that it produces into
  *environ*. Every call to #invoke() is independent: resolve, capture, apply.
  """

  def __init__(
    self,
    environ: t.Optional[IEnvironment] = None,
    runner: t.Optional[ICommandRunner] = None,
    locator: t.Optional[ToolchainLocator] = None,
    cache: t.Optional[SnapshotCache] = None,
    strict: bool = True,
  ) -> None:
    self.environ = environ if environ is not None else ProcessEnvironment()
    self.runner = runner if runner is not None else ShellCommandRunner()
    if locator is None:
      locator = ToolchainLocator(default_rules(), self.environ)
    self.locator = locator
    self.cache = cache
    self.strict = strict
    check_instance_of(self.environ, IEnvironment, 'environ')
    check_instance_of(self.runner, ICommandRunner, 'runner')

  @classmethod
  def from_settings(
    cls,
    settings: 'Settings',
    environ: t.Optional[IEnvironment] = None,
    runner: t.Optional[ICommandRunner] = None,
  ) -> 'ToolchainInvoker':
    cache = None
    if settings.get_bool('batchvars.cache', False):
      cache = SnapshotCache.from_file(
        settings.get('batchvars.cache_file', DEFAULT_CACHE_FILE),
        settings.get_int('batchvars.cache_expires', None))
    return cls(
      environ=environ,
      runner=runner,
      cache=cache,
      strict=settings.get_bool('batchvars.strict', True))

  def resolve(
    self,
    version: t.Optional[str] = None,
    arch: t.Optional[str] = None,
    configuration: str = 'release',
  ) -> ToolchainInvocation:
    """
    Resolves the invocation for *version*, or for the preferred installed toolchain if no
    version is specified. Nothing is executed.
    """

    if version is None:
      version = self.locator.locate()
      log.info('detected toolchain %s', version)
    if arch is None:
      arch = get_host_arch()
    return resolve_toolchain(version, arch, configuration, self.environ)

  def capture(self, invocation: ToolchainInvocation) -> EnvironmentSnapshot:
    """
    Runs the setup script of *invocation* and returns the captured environment. With a cache,
    only the variables that the script changed relative to #environ are stored, and a cache
    hit returns only those.
    """

    if self.cache is not None:
      changes = self.cache.get(invocation.cache_key)
      if changes is not None:
        return changes
    snapshot = capture_environment(
      invocation.script,
      invocation.arguments,
      invocation.discard_stderr,
      runner=self.runner,
      strict=self.strict)
    if self.cache is not None and snapshot:
      self.cache.put(invocation.cache_key, diff_snapshot(snapshot, self.environ))
    return snapshot

  def invoke(
    self,
    version: t.Optional[str] = None,
    arch: t.Optional[str] = None,
    configuration: str = 'release',
  ) -> EnvironmentSnapshot:
    """
    Resolves, captures and applies the environment of a toolchain. Returns what
    #capture() returned.
    """

    invocation = self.resolve(version, arch, configuration)
    snapshot = self.capture(invocation)
    apply_snapshot(snapshot, self.environ)
    return snapshot
