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
Access to a process environment behind a small interface, and the operations to apply a
captured #EnvironmentSnapshot to it.
"""

import abc
import logging
import os
import typing as t

log = logging.getLogger(__name__)

#: An ordered sequence of `(key, value)` pairs in the order that they were enumerated.
EnvironmentSnapshot = t.List[t.Tuple[str, str]]


class IEnvironment(metaclass=abc.ABCMeta):
  """
  Interface for a mutable table of environment variables.
  """

  @abc.abstractmethod
  def __getitem__(self, key: str) -> str:
    pass

  @abc.abstractmethod
  def __iter__(self) -> t.Iterator[str]:
    pass

  @abc.abstractmethod
  def set(self, key: str, value: str) -> None:
    pass

  def __contains__(self, key: str) -> bool:
    try:
      self[key]
    except KeyError:
      return False
    return True

  def get(self, key: str, default: t.Optional[str] = None) -> t.Optional[str]:
    try:
      return self[key]
    except KeyError:
      return default

  def items(self) -> t.Iterator[t.Tuple[str, str]]:
    for key in self:
      yield key, self[key]


class ProcessEnvironment(IEnvironment):
  """
  The environment of the current process (#os.environ). Case sensitivity of keys is that of
  the platform.
  """

  def __getitem__(self, key: str) -> str:
    return os.environ[key]

  def __iter__(self) -> t.Iterator[str]:
    return iter(list(os.environ))

  def set(self, key: str, value: str) -> None:
    os.environ[key] = value


class MappingEnvironment(IEnvironment):
  """
  An in-memory environment. With *case_insensitive* enabled, keys are matched the way Windows
  matches them; the spelling of the first assignment of a key is retained.
  """

  def __init__(
    self,
    mapping: t.Optional[t.Mapping[str, str]] = None,
    case_insensitive: bool = False,
  ) -> None:
    self._case_insensitive = case_insensitive
    self._values: t.Dict[str, str] = {}
    self._keys: t.Dict[str, str] = {}
    for key, value in (mapping or {}).items():
      self.set(key, value)

  def _normalize(self, key: str) -> str:
    return key.upper() if self._case_insensitive else key

  def __getitem__(self, key: str) -> str:
    return self._values[self._normalize(key)]

  def __iter__(self) -> t.Iterator[str]:
    return iter(list(self._keys.values()))

  def __len__(self) -> int:
    return len(self._values)

  def __repr__(self) -> str:
    return 'MappingEnvironment({!r})'.format(self.as_dict())

  def set(self, key: str, value: str) -> None:
    norm = self._normalize(key)
    self._keys.setdefault(norm, key)
    self._values[norm] = value

  def as_dict(self) -> t.Dict[str, str]:
    return dict(self.items())


def apply_snapshot(snapshot: EnvironmentSnapshot, environ: IEnvironment) -> None:
  """
  Writes every entry of *snapshot* into *environ* in order, overwriting existing values. Keys
  that are not in the snapshot are left untouched.
  """

  for key, value in snapshot:
    environ.set(key, value)
  log.debug('applied %d environment variable(s)', len(snapshot))


def diff_snapshot(snapshot: EnvironmentSnapshot, environ: IEnvironment) -> EnvironmentSnapshot:
  """
  Returns the entries of *snapshot* that would change *environ* if applied.
  """

  return [(key, value) for key, value in snapshot if environ.get(key) != value]
