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

import argparse
import logging
import subprocess as sp
import sys
import typing as t
from pathlib import Path

from termcolor import colored

from batchvars.emit import SHELLS, render
from batchvars.environment import IEnvironment, diff_snapshot
from batchvars.errors import BatchvarsError
from batchvars.invoker import ToolchainInvoker
from batchvars.settings import Settings
from batchvars.shell import ICommandRunner
from batchvars.toolchains import VERSIONS
from batchvars.util.preconditions import check_choice

SETTINGS_FILE = Path('batchvars.properties')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')

parser = argparse.ArgumentParser(
  prog='batchvars',
  description='Import the environment of a Visual Studio or Windows SDK toolchain.')
parser.add_argument('-O', '--option', default=[], action='append',
  help='Set or override an option in the settings.')
parser.add_argument('--settings-file', default=SETTINGS_FILE, type=Path,
  help='Point to another settings file. (default: %(default)s)')
parser.add_argument('--log-level', choices=LOG_LEVELS,
  help='The logging level. (default: batchvars.log_level or WARNING)')
subparsers = parser.add_subparsers(dest='command')


def _add_toolchain_arguments(subparser: argparse.ArgumentParser) -> None:
  subparser.add_argument('--version', choices=VERSIONS + ('auto',),
    help='The toolchain version. (default: batchvars.version or auto)')
  subparser.add_argument('--arch',
    help='The target architecture, eg. x86 or amd64. (default: batchvars.arch or host)')
  subparser.add_argument('--configuration',
    help='The Windows SDK build configuration, release or debug. '
      '(default: batchvars.configuration or release)')


env_parser = subparsers.add_parser('env',
  help='Print the environment changes of the toolchain as shell statements.')
_add_toolchain_arguments(env_parser)
env_parser.add_argument('--shell', choices=SHELLS,
  help='The syntax of the output. (default: batchvars.shell or cmd)')

list_parser = subparsers.add_parser('list',
  help='List the detected toolchains in order of preference.')

run_parser = subparsers.add_parser('run',
  help='Run a command in the environment of the toolchain.')
_add_toolchain_arguments(run_parser)
run_parser.add_argument('argv', nargs=argparse.REMAINDER, metavar='command',
  help='The command to run, optionally separated by --.')


def load_settings(args: argparse.Namespace) -> Settings:
  def _invalid_option(index: int, line: str) -> None:
    print(colored('warning:', 'magenta'), 'ignoring invalid option {!r}'.format(line),
      file=sys.stderr)

  settings = Settings.from_file(args.settings_file)
  settings.update(Settings.parse(args.option, _invalid_option))
  return settings


def _toolchain_options(args: argparse.Namespace, settings: Settings) -> t.Dict[str, t.Any]:
  version = args.version or settings.get('batchvars.version', 'auto')
  return {
    'version': None if version == 'auto' else version,
    'arch': args.arch or settings.get('batchvars.arch', None),
    'configuration': args.configuration or settings.get('batchvars.configuration', 'release'),
  }


def _env(args: argparse.Namespace, settings: Settings, invoker: ToolchainInvoker) -> int:
  invocation = invoker.resolve(**_toolchain_options(args, settings))
  snapshot = invoker.capture(invocation)
  changes = diff_snapshot(snapshot, invoker.environ)
  output = render(changes, args.shell or settings.get('batchvars.shell', 'cmd'))
  if output:
    print(output)
  return 0


def _list(args: argparse.Namespace, settings: Settings, invoker: ToolchainInvoker) -> int:
  versions = invoker.locator.available()
  if not versions:
    print('no toolchain installations could be detected.', file=sys.stderr)
    return 1
  for index, version in enumerate(versions):
    if index == 0:
      print(colored('* ' + version, 'green'))
    else:
      print('  ' + version)
  return 0


def _run(args: argparse.Namespace, settings: Settings, invoker: ToolchainInvoker) -> int:
  argv = list(args.argv)
  if argv and argv[0] == '--':
    argv.pop(0)
  if not argv:
    run_parser.error('no command specified')
  invoker.invoke(**_toolchain_options(args, settings))
  return sp.call(argv, env=dict(invoker.environ.items()))


_COMMANDS = {'env': _env, 'list': _list, 'run': _run}


def main(
  argv: t.Optional[t.Sequence[str]] = None,
  environ: t.Optional[IEnvironment] = None,
  runner: t.Optional[ICommandRunner] = None,
) -> int:
  args = parser.parse_args(argv)
  if not args.command:
    parser.print_usage()
    return 1

  try:
    settings = load_settings(args)
    level = args.log_level or settings.get('batchvars.log_level', 'WARNING').upper()
    check_choice(level, LOG_LEVELS, 'log level')
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')
    invoker = ToolchainInvoker.from_settings(settings, environ, runner)
    return _COMMANDS[args.command](args, settings, invoker)
  except BatchvarsError as exc:
    print(colored('error:', 'red'), exc, file=sys.stderr)
    return 1


if __name__ == '__main__':
  sys.exit(main())
