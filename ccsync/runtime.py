import os

import dotenv

from .copier import CopyConfig, DEFAULT_COMPUTERS, DEFAULT_SOURCE_PATH
from . import display
from .error import PrintableError
from . import parser

BASE_PATH_VAR = 'COMPUTERCRAFT_PATH'
DOTENV_FILE_NAME = '.env'


class Runtime:
    def __init__(self, args, env):
        if args['--quiet'] and args['--verbose']:
            raise CommandLineError(
                "ccsync can't be quiet and verbose at the same time.")
        self.quiet = args['--quiet']
        self.verbose = args['--verbose']

        self._set_project(args)
        self.env = _load_env(self.project_dir, env)
        self.config = CopyConfig(
            base_path=self._get_base_path(args),
            computers=self._get_computers(args),
            source_path=self._get_source_path(args))

        self.display = get_display(args)

    def _set_project(self, args):
        explicit_file = args['--file']
        if explicit_file:
            if not os.path.isfile(explicit_file):
                raise CommandLineError(
                    'Project file {} does not exist.', explicit_file)
            self.project_file = explicit_file
        else:
            self.project_file = find_project_file(
                os.getcwd(), parser.DEFAULT_PROJECT_FILE_NAME)
        if self.project_file is None:
            self.project_dir = os.getcwd()
            self.project = parser.ProjectFile(None, None, None)
        else:
            self.project_dir = os.path.dirname(
                os.path.abspath(self.project_file))
            self.project = parser.parse_file(self.project_file)

    def _get_base_path(self, args):
        path = (args['--path'] or self.env.get(BASE_PATH_VAR)
                or self.project.path)
        if path is None:
            return None
        return os.path.expanduser(path)

    def _get_source_path(self, args):
        return args['--src'] or self.project.src or DEFAULT_SOURCE_PATH

    def _get_computers(self, args):
        ids = args['<computer>']
        if not ids:
            if self.project.computers is not None:
                return self.project.computers
            return DEFAULT_COMPUTERS
        try:
            return tuple(parser.parse_computer_id(i) for i in ids)
        except parser.ParserError as e:
            raise CommandLineError('{}', e.message) from e


def find_project_file(start_dir, basename):
    '''Walk up the directory tree until we find a file of the given name.
    Returns None if there isn't one, since the project file is optional.'''
    prefix = os.path.abspath(start_dir)
    while True:
        candidate = os.path.join(prefix, basename)
        if os.path.isfile(candidate):
            return candidate
        if os.path.exists(candidate):
            raise PrintableError("Found {}, but it's not a file.", candidate)
        if os.path.dirname(prefix) == prefix:
            # We've walked all the way to the top.
            return None
        prefix = os.path.dirname(prefix)


def _load_env(project_dir, env):
    '''Variables from a .env file next to the project fill in for anything the
    real environment doesn't set. The real environment always wins.'''
    dotenv_path = os.path.join(project_dir, DOTENV_FILE_NAME)
    merged = {}
    if os.path.isfile(dotenv_path):
        values = dotenv.dotenv_values(dotenv_path)
        # A bare "KEY" line with no "=" comes back as None.
        merged.update((k, v) for k, v in values.items() if v is not None)
    merged.update(env)
    return merged


def get_display(args):
    if args['--quiet']:
        return display.QuietDisplay()
    elif args['--verbose']:
        return display.VerboseDisplay()
    else:
        return display.NormalDisplay()


class CommandLineError(PrintableError):
    pass
