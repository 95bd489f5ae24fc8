
import json
import logging

import pytest

from batchvars.emit import render
from batchvars.errors import ConfigurationError

CHANGES = [('PATH', 'C:\\VC\\bin;C:\\Windows'), ('VCINSTALLDIR', "C:\\Bob's VC\\")]


def test_render_cmd():
  assert render(CHANGES, 'cmd') == \
    'set "PATH=C:\\VC\\bin;C:\\Windows"\n' \
    'set "VCINSTALLDIR=C:\\Bob\'s VC\\"'


def test_render_powershell():
  assert render(CHANGES, 'powershell').splitlines() == [
    "$env:PATH = 'C:\\VC\\bin;C:\\Windows'",
    "$env:VCINSTALLDIR = 'C:\\Bob''s VC\\'",
  ]


def test_render_sh():
  assert render([('A', 'x y'), ('B', 'plain')], 'sh') == "export A='x y'\nexport B=plain"


def test_render_json():
  assert json.loads(render(CHANGES, 'json')) == dict(CHANGES)


def test_render_nothing():
  assert render([], 'cmd') == ''


def test_render_unknown_shell():
  with pytest.raises(ConfigurationError):
    render(CHANGES, 'fish')


def test_render_powershell_braces_special_names():
  changes = [('ProgramFiles(x86)', 'C:\\Program Files (x86)'), ('A}B', '1')]
  assert render(changes, 'powershell').splitlines() == [
    "${env:ProgramFiles(x86)} = 'C:\\Program Files (x86)'",
    "${env:A`}B} = '1'",
  ]


def test_render_sh_skips_invalid_names(caplog):
  with caplog.at_level(logging.WARNING, logger='batchvars.emit'):
    output = render([('ProgramFiles(x86)', 'C:\\P'), ('PATH', '/bin')], 'sh')
  assert output == 'export PATH=/bin'
  assert 'ProgramFiles(x86)' in caplog.text
