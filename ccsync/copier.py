import collections
import os
import shutil

from .error import PrintableError, error_context

DEFAULT_COMPUTERS = (0, 1)
DEFAULT_SOURCE_PATH = os.path.join('.', 'src')

CopyConfig = collections.namedtuple(
    'CopyConfig', ['base_path', 'computers', 'source_path'])


class ConfigError(PrintableError):
    pass


class CopyError(PrintableError):
    pass


def computer_path(base_path, computer):
    return os.path.join(base_path, str(computer))


def copy_to_computers(config, display):
    '''Overlay the source tree onto every computer directory, in order. Files
    that already exist in a computer directory are overwritten, and files that
    only exist there are left alone. The first failure stops the run.'''
    check_config(config)
    for computer in config.computers:
        dest = computer_path(config.base_path, computer)
        with error_context('computer {}'.format(computer)):
            with display.get_handle('computer {}'.format(computer)) as handle:
                copy_to_computer(config.source_path, dest, handle)


def check_config(config):
    # Both of these are checked up front, so that a bad config fails before
    # any computer gets written.
    if not config.base_path:
        raise ConfigError(
            'The computer directory is not set. Set COMPUTERCRAFT_PATH to '
            'the computercraft/computer directory of your save.')
    if not os.path.isdir(config.source_path):
        raise ConfigError('Source directory {} does not exist.',
                          config.source_path)


def copy_to_computer(source_path, dest, handle):
    '''Copy everything under source_path into dest, creating dest if needed,
    and return the number of files copied. Each copied file is reported to
    the display handle.'''
    copied = []

    def copy_and_report(src, dst):
        # Overwrite by replacing, so a read-only file or a link left by an
        # earlier run doesn't get in the way.
        _remove_file(dst)
        result = shutil.copy2(src, dst)
        relpath = os.path.relpath(src, source_path)
        copied.append(relpath)
        handle.write(relpath + '\n')
        return result

    try:
        _remove_stale_links(source_path, dest)
        shutil.copytree(
            source_path,
            dest,
            symlinks=True,
            copy_function=copy_and_report,
            dirs_exist_ok=True,
        )
    except OSError as e:
        # shutil.Error is an OSError too. It collects every failed file.
        raise CopyError('Failed to copy {} to {}:\n{}',
                        source_path, dest, e) from e
    handle.write('copied {} file{}\n'.format(
        len(copied), '' if len(copied) == 1 else 's'))
    return len(copied)


def _remove_stale_links(source_path, dest):
    '''copytree creates symlinks with os.symlink, which refuses to replace
    anything. Clear the way for every link in the source.'''
    for dirpath, dirnames, filenames in os.walk(source_path):
        for name in dirnames + filenames:
            src = os.path.join(dirpath, name)
            if os.path.islink(src):
                relpath = os.path.relpath(src, source_path)
                _remove_file(os.path.join(dest, relpath))


def _remove_file(path):
    # Directories are left alone, so a real directory still makes the copy
    # fail loudly.
    if os.path.islink(path) or os.path.isfile(path):
        os.unlink(path)
