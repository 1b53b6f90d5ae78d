import collections
import os

import yaml

from .error import PrintableError

DEFAULT_PROJECT_FILE_NAME = 'ccsync.yaml'

# Every field is optional. Anything missing falls back to the environment or
# to the built-in defaults in runtime.py.
ProjectFile = collections.namedtuple(
    'ProjectFile', ['path', 'src', 'computers'])


class ParserError(PrintableError):
    pass


def parse_file(file_path):
    with open(file_path) as f:
        project = parse_string(f.read())
    # Relative paths in the project file are relative to the file itself, not
    # to wherever ccsync happens to be running from.
    project_dir = os.path.dirname(os.path.abspath(file_path))
    return project._replace(
        path=_relative_to(project_dir, project.path),
        src=_relative_to(project_dir, project.src))


def parse_string(yaml_str):
    try:
        blob = yaml.safe_load(yaml_str)
    except yaml.YAMLError as e:
        raise ParserError("YAML parser error:\n\n{}", e) from e
    if blob is None:
        blob = {}
    if not isinstance(blob, dict):
        raise ParserError('The project file must be a mapping of fields, '
                          'found {}.', type(blob).__name__)
    return _parse_toplevel(blob)


def _parse_toplevel(blob):
    path = _extract_optional_path_field(blob, 'path')
    src = _extract_optional_path_field(blob, 'src')
    computers = _extract_optional_computers_field(blob, 'computers')
    if blob:
        raise ParserError("Unknown toplevel fields: {}",
                          ", ".join(str(key) for key in blob.keys()))
    return ProjectFile(path, src, computers)


def _extract_optional_path_field(blob, name):
    value = blob.pop(name, None)
    if value is not None and not isinstance(value, str):
        raise ParserError('"{}" field must be a string, found {}.', name,
                          repr(value))
    return value


def _extract_optional_computers_field(blob, name):
    value = blob.pop(name, None)
    if value is None:
        return None
    # A single id is allowed as shorthand for a one-element list.
    if not isinstance(value, list):
        value = [value]
    return tuple(parse_computer_id(item) for item in value)


def parse_computer_id(value):
    '''Computer ids are non-negative integers. Strings of decimal digits are
    also accepted, since that's what comes in from the command line.'''
    # bool is a subclass of int, and "yes" means nothing as a computer id.
    if isinstance(value, int) and not isinstance(value, bool):
        computer = value
    elif isinstance(value, str) and value.isdecimal():
        computer = int(value)
    else:
        raise ParserError('Computer ids must be non-negative integers, '
                          'found {}.', repr(value))
    if computer < 0:
        raise ParserError('Computer ids must be non-negative integers, '
                          'found {}.', repr(value))
    return computer


def _relative_to(project_dir, path):
    if path is None:
        return None
    return os.path.join(project_dir, os.path.expanduser(path))
