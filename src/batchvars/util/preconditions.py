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

from batchvars.errors import ConfigurationError


def check_choice(value: str, choices: t.Collection[str], display_name: str) -> str:
  if value not in choices:
    raise ConfigurationError('unsupported {}: {!r} (expected one of {})'.format(
      display_name, value, ', '.join(map(repr, choices))))
  return value


def check_instance_of(
  value: t.Any,
  types: t.Union[t.Type, t.Tuple[t.Type, ...]],
  display_name: t.Union[None, str, t.Callable[[], str]] = None,
) -> None:

  if not isinstance(value, types):
    if isinstance(types, tuple):
      type_str = ', '.join(x.__name__ for x in types)
    else:
      type_str = types.__name__
    message = f'expected instance of {type_str}, got {type(value).__name__}'
    if display_name is not None:
      name = display_name() if callable(display_name) else display_name
      message = f'{name}: {message}'
    raise TypeError(message)
