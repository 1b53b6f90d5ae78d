#! /usr/bin/env python3

import os
import sys

import docopt

from . import compat
from . import copier
from .error import PrintableError
from .runtime import Runtime

__doc__ = '''\
Usage:
    ccsync [-hqv] [--file=<file>] [--path=<dir>] [--src=<dir>] [<computer>...]
    ccsync [--help|--version]

Copies your source directory into the directory of each ComputerCraft
computer listed, overwriting files that are already there. Files that
only exist on a computer are left alone. With no <computer> arguments,
the ids come from ccsync.yaml, or default to computers 0 and 1.

Options:
    -h --help          show this help
    -q --quiet         don't print anything
    -v --verbose       print every file copied
    --version          print the version and exit

    --file=<file>
        The project file to use instead of searching the current dir and its
        parents for 'ccsync.yaml'. The project file is optional.
    --path=<dir>
        The computercraft/computer directory of your save. Defaults to
        $COMPUTERCRAFT_PATH, which can also be set in a .env file next to
        the project file.
    --src=<dir>
        The directory to copy. Defaults to 'src' in the current dir.
'''


def get_version():
    version_file = os.path.join(compat.MODULE_ROOT, 'VERSION')
    with open(version_file) as f:
        return f.read().strip()


def print_red(*args, **kwargs):
    if compat.is_fancy_terminal():
        sys.stdout.write('\x1b[31m')
    print(*args, **kwargs)
    if compat.is_fancy_terminal():
        sys.stdout.write('\x1b[39m')


def maybe_print_help_and_return(args):
    if args['--version']:
        print(get_version())
        return 0
    if args['--help']:
        print(__doc__, end='')
        return 0
    return None


# Called as a setup.py entry point, or from __main__.py (`python3 -m ccsync`).
def main(*, argv=None, env=None, nocatch=False):
    if argv is None:
        argv = sys.argv[1:]
    if env is None:
        env = os.environ.copy()

    args = docopt.docopt(__doc__, argv, help=False)

    ret = maybe_print_help_and_return(args)
    if ret is not None:
        return ret

    try:
        runtime = Runtime(args, env)
        copier.copy_to_computers(runtime.config, runtime.display)
    except PrintableError as e:
        if args['--verbose'] or nocatch:
            # Just allow the stacktrace to print if verbose, or in testing.
            raise
        print_red(e.message, end='' if e.message.endswith('\n') else '\n')
        return 1
    return 0
