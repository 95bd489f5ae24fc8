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
Detects which toolchain version is installed by evaluating an ordered list of rules. The first
rule whose predicate holds wins.
"""

import abc
import logging
import os
import re
import typing as t
from dataclasses import dataclass

from batchvars.environment import IEnvironment
from batchvars.errors import NotFoundError

log = logging.getLogger(__name__)

PathExists = t.Callable[[str], bool]


def expand_variables(template: str, environ: IEnvironment) -> t.Optional[str]:
  """
  Replaces `%NAME%` references in *template* with values from *environ*. Returns #None if any
  of the referenced variables is not set.
  """

  missing = False

  def _sub(match: 're.Match') -> str:
    nonlocal missing
    value = environ.get(match.group(1))
    if value is None:
      missing = True
      return ''
    return value

  result = re.sub(r'%([^%]+)%', _sub, template)
  return None if missing else result


class Predicate(metaclass=abc.ABCMeta):

  @abc.abstractmethod
  def test(self, environ: IEnvironment, path_exists: PathExists) -> bool:
    pass


@dataclass(frozen=True)
class EnvironmentVariableSet(Predicate):
  name: str

  def test(self, environ: IEnvironment, path_exists: PathExists) -> bool:
    return self.name in environ


@dataclass(frozen=True)
class FileExists(Predicate):
  """
  Holds if the file at *template* exists after expanding `%NAME%` variable references. A
  reference to an unset variable makes the predicate fail.
  """

  template: str

  def test(self, environ: IEnvironment, path_exists: PathExists) -> bool:
    path = expand_variables(self.template, environ)
    return path is not None and path_exists(path)


class AllOf(Predicate):

  def __init__(self, *predicates: Predicate) -> None:
    self.predicates = predicates

  def __repr__(self) -> str:
    return 'AllOf({})'.format(', '.join(map(repr, self.predicates)))

  def test(self, environ: IEnvironment, path_exists: PathExists) -> bool:
    return all(p.test(environ, path_exists) for p in self.predicates)


@dataclass(frozen=True)
class Rule:
  version: str
  predicate: Predicate


class ToolchainLocator:
  """
  Evaluates *rules* top to bottom. The order of the rules is the order of preference.
  """

  def __init__(
    self,
    rules: t.Sequence[Rule],
    environ: IEnvironment,
    path_exists: t.Optional[PathExists] = None,
  ) -> None:
    self.rules = list(rules)
    self.environ = environ
    self.path_exists = path_exists or os.path.isfile

  def _matches(self) -> t.Iterator[str]:
    for rule in self.rules:
      if rule.predicate.test(self.environ, self.path_exists):
        log.debug('rule for %r matched: %r', rule.version, rule.predicate)
        yield rule.version

  def locate(self) -> str:
    """
    Returns the version of the first matching rule or raises a #NotFoundError.
    """

    for version in self._matches():
      return version
    raise NotFoundError([rule.version for rule in self.rules])

  def available(self) -> t.List[str]:
    """
    Returns all versions with a matching rule in order of preference.
    """

    return list(self._matches())
