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

import abc
import typing as t
from pathlib import Path

from batchvars.errors import ConfigurationError

T = t.TypeVar('T')


class Settings(metaclass=abc.ABCMeta):
  """
  Interface similar to a mapping but it provides additional helpers to read values of various
  types.

  # Supported Settings

  * `batchvars.version` (defaults to the preferred installed toolchain)
  * `batchvars.arch` (defaults to the host architecture)
  * `batchvars.configuration` (defaults to `release`)
  * `batchvars.strict` (defaults to `true`)
  * `batchvars.cache`, `batchvars.cache_file`, `batchvars.cache_expires`
  * `batchvars.shell` (defaults to `cmd`)
  * `batchvars.log_level` (defaults to `WARNING`)
  """

  @abc.abstractmethod
  def __getitem__(self, key: str) -> str:
    pass

  @abc.abstractmethod
  def __iter__(self) -> t.Iterator[str]:
    pass

  @abc.abstractmethod
  def set(self, key: str, value: t.Union[str, int, bool]) -> None:
    pass

  def get(self, key: str, default: T) -> t.Union[str, T]:
    try:
      return self[key]
    except KeyError:
      return default

  def get_int(self, key: str, default: T) -> t.Union[int, T]:
    try:
      return int(self[key].strip())
    except KeyError:
      return default
    except ValueError:
      raise ConfigurationError(f'{key!r} is not an integer: {self[key]!r}')

  def get_bool(self, key: str, default: bool = False) -> bool:
    try:
      value = self[key].strip().lower()
    except KeyError:
      return default
    if value in ('yes', 'true', 'on', '1'):
      return True
    if value in ('no', 'false', 'off', '0'):
      return False
    raise ConfigurationError(f'{key!r} is not a boolean: {self[key]!r}')

  def update(self, other: 'Settings') -> None:
    for key in other:
      value = other.get(key, None)
      assert value is not None, (other, key)
      self.set(key, value)

  @staticmethod
  def of(mapping: t.MutableMapping[str, str]) -> 'Settings':
    return _MappingSettings(mapping)

  @staticmethod
  def parse(
    lines: t.Iterable[str],
    on_invalid_line: t.Optional[t.Callable[[int, str], None]] = None,
  ) -> 'Settings':
    """
    Parses a list of `key=value` lines and returns it as a #Settings object. Lines starting with
    the hashsign (`#`) and empty lines are skipped. If provided, lines that do not conform to the
    `key=value` format are passed to `on_invalid_line` and are skipped.
    """

    mapping: t.Dict[str, str] = {}
    for index, line in enumerate(lines):
      line = line.strip()
      if not line or line.startswith('#'):
        continue
      key, sep, value = line.partition('=')
      if not sep:
        if on_invalid_line:
          on_invalid_line(index, line)
        continue
      mapping[key.strip()] = value.strip()
    return _MappingSettings(mapping)

  @staticmethod
  def from_file(path: Path, not_exist_ok: bool = True) -> 'Settings':
    if not path.exists() and not_exist_ok:
      return Settings.of({})
    return Settings.parse(path.read_text().splitlines())


class _MappingSettings(Settings):

  def __init__(self, mapping: t.MutableMapping[str, str]) -> None:
    self._mapping = mapping

  def __getitem__(self, key: str) -> str:
    return self._mapping[key]

  def __iter__(self) -> t.Iterator[str]:
    return iter(self._mapping)

  def set(self, key: str, value: t.Union[str, int, bool]) -> None:
    if not isinstance(value, (str, int, bool)):
      raise TypeError(f'expected typing.Union[str, int, bool], got {type(value).__name__}')
    if isinstance(value, bool):
      value = 'true' if value else 'false'
    self._mapping[key] = str(value)
