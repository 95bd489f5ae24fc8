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
Renders environment changes as statements for the shell that invoked us. A child process can
not modify the environment of its parent, so the parent has to evaluate our output.
"""

import json
import logging
import re
import shlex
import typing as t

from batchvars.environment import EnvironmentSnapshot
from batchvars.util.preconditions import check_choice

log = logging.getLogger(__name__)

IDENTIFIER_REGEX = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def _render_cmd(key: str, value: str) -> str:
  return 'set "{}={}"'.format(key, value)


def _render_powershell(key: str, value: str) -> t.Optional[str]:
  value = "'{}'".format(value.replace("'", "''"))
  if IDENTIFIER_REGEX.match(key):
    return '$env:{} = {}'.format(key, value)
  # Braced variable names escape `}` and the escape character itself with a backtick.
  key = key.replace('`', '``').replace('}', '`}')
  return '${{env:{}}} = {}'.format(key, value)


def _render_sh(key: str, value: str) -> t.Optional[str]:
  if not IDENTIFIER_REGEX.match(key):
    log.warning('skipping %r, not a valid sh variable name', key)
    return None
  return 'export {}={}'.format(key, shlex.quote(value))


_RENDERERS: t.Dict[str, t.Callable[[str, str], t.Optional[str]]] = {
  'cmd': _render_cmd,
  'powershell': _render_powershell,
  'sh': _render_sh,
}

SHELLS = tuple(_RENDERERS) + ('json',)


def render(changes: EnvironmentSnapshot, shell: str) -> str:
  check_choice(shell, SHELLS, 'shell')
  if shell == 'json':
    return json.dumps(dict(changes), sort_keys=True, indent=2)
  renderer = _RENDERERS[shell]
  lines = (renderer(key, value) for key, value in changes)
  return '\n'.join(line for line in lines if line is not None)
