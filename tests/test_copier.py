import io
import os
import unittest

from ccsync.copier import (ConfigError, CopyConfig, CopyError,
                           DEFAULT_COMPUTERS, copy_to_computer,
                           copy_to_computers)
from ccsync.display import NormalDisplay, QuietDisplay, VerboseDisplay

import shared


class CopierTest(shared.CcsyncTest):
    def setUp(self):
        self.source_dir = shared.create_dir({
            'main.lua': 'print("hi")',
            'lib/util.lua': 'return {}',
        })
        self.base_dir = shared.create_dir()
        self.output = io.StringIO()
        self.display = NormalDisplay(self.output)

    def config(self, computers=DEFAULT_COMPUTERS, **kwargs):
        fields = dict(base_path=self.base_dir, computers=computers,
                      source_path=self.source_dir)
        fields.update(kwargs)
        return CopyConfig(**fields)

    def assert_computer(self, computer, expected):
        shared.assert_contents(
            os.path.join(self.base_dir, str(computer)), expected)

    def test_copies_to_every_computer(self):
        copy_to_computers(self.config(), self.display)
        expected = {'main.lua': 'print("hi")', 'lib/util.lua': 'return {}'}
        self.assert_computer(0, expected)
        self.assert_computer(1, expected)
        self.assertEqual(
            'Copying to computer 0\nCopying to computer 1\n',
            self.output.getvalue())

    def test_computers_are_copied_in_order(self):
        copy_to_computers(self.config(computers=(5, 2, 9)), self.display)
        self.assertEqual(
            ['Copying to computer 5', 'Copying to computer 2',
             'Copying to computer 9'],
            self.output.getvalue().splitlines())
        self.assertEqual(['2', '5', '9'], sorted(os.listdir(self.base_dir)))

    def test_overwrites_existing_files(self):
        shared.write_files(self.base_dir, {'0/main.lua': 'old'})
        copy_to_computers(self.config(computers=(0,)), self.display)
        self.assert_computer(0, {'main.lua': 'print("hi")',
                                 'lib/util.lua': 'return {}'})

    def test_keeps_files_only_on_the_computer(self):
        shared.write_files(self.base_dir, {
            '0/startup.lua': 'shell.run("main")',
            '0/lib/extra.lua': 'extra',
        })
        copy_to_computers(self.config(computers=(0,)), self.display)
        self.assert_computer(0, {
            'main.lua': 'print("hi")',
            'lib/util.lua': 'return {}',
            'startup.lua': 'shell.run("main")',
            'lib/extra.lua': 'extra',
        })

    def test_running_twice_is_the_same_as_once(self):
        copy_to_computers(self.config(), self.display)
        first = shared.read_dir(self.base_dir)
        copy_to_computers(self.config(), QuietDisplay())
        self.assertDictEqual(first, shared.read_dir(self.base_dir))

    def test_creates_missing_base_dirs(self):
        base = os.path.join(self.base_dir, 'saves', 'world', 'computercraft',
                            'computer')
        copy_to_computers(self.config(base_path=base), self.display)
        shared.assert_contents(os.path.join(base, '1'), {
            'main.lua': 'print("hi")',
            'lib/util.lua': 'return {}',
        })

    def test_unset_base_path_writes_nothing(self):
        for base_path in (None, ''):
            with self.assertRaises(ConfigError):
                copy_to_computers(self.config(base_path=base_path),
                                  self.display)
        self.assertEqual('', self.output.getvalue())
        self.assertListEqual([], os.listdir(self.base_dir))

    def test_missing_source(self):
        missing = os.path.join(self.source_dir, 'nope')
        with self.assertRaises(ConfigError):
            copy_to_computers(self.config(source_path=missing), self.display)
        self.assertListEqual([], os.listdir(self.base_dir))

    def test_failure_stops_at_the_broken_computer(self):
        # A plain file where computer 0's directory should be.
        shared.write_files(self.base_dir, {'0': 'not a dir'})
        with self.assertRaises(CopyError) as cm:
            copy_to_computers(self.config(), self.display)
        self.assertTrue(cm.exception.message.startswith('In computer 0:'))
        self.assertFalse(os.path.exists(os.path.join(self.base_dir, '1')))
        # The progress line goes out before the copy is attempted.
        self.assertEqual('Copying to computer 0\n', self.output.getvalue())

    def test_empty_computer_list(self):
        copy_to_computers(self.config(computers=()), self.display)
        self.assertListEqual([], os.listdir(self.base_dir))
        self.assertEqual('', self.output.getvalue())

    def test_copy_to_computer_counts_files(self):
        dest = os.path.join(self.base_dir, 'dest')
        display = VerboseDisplay(self.output)
        with display.get_handle('dest') as handle:
            count = copy_to_computer(self.source_dir, dest, handle)
        self.assertEqual(2, count)
        lines = self.output.getvalue().splitlines()
        self.assertEqual('Copying to dest', lines[0])
        self.assertCountEqual(
            ['  main.lua', '  ' + os.path.join('lib', 'util.lua')],
            lines[1:3])
        self.assertEqual('  copied 2 files', lines[3])

    @unittest.skipIf(os.name == 'nt', 'symlinks need privileges on Windows')
    def test_symlinks_are_copied_as_links(self):
        os.symlink('main.lua', os.path.join(self.source_dir, 'link.lua'))
        copy_to_computers(self.config(computers=(0,)), self.display)
        link = os.path.join(self.base_dir, '0', 'link.lua')
        self.assertTrue(os.path.islink(link))
        self.assertEqual('main.lua', os.readlink(link))

    @unittest.skipIf(os.name == 'nt', 'symlinks need privileges on Windows')
    def test_symlinks_survive_a_second_run(self):
        os.symlink('main.lua', os.path.join(self.source_dir, 'link.lua'))
        os.symlink('lib', os.path.join(self.source_dir, 'lib_link'))
        copy_to_computers(self.config(computers=(0,)), self.display)
        copy_to_computers(self.config(computers=(0,)), self.display)
        dest = os.path.join(self.base_dir, '0')
        self.assertEqual('main.lua',
                         os.readlink(os.path.join(dest, 'link.lua')))
        self.assertEqual('lib', os.readlink(os.path.join(dest, 'lib_link')))

    @unittest.skipIf(os.name == 'nt', 'symlinks need privileges on Windows')
    def test_symlink_replaces_a_file_on_the_computer(self):
        shared.write_files(self.base_dir, {'0/link.lua': 'a plain file'})
        os.symlink('main.lua', os.path.join(self.source_dir, 'link.lua'))
        copy_to_computers(self.config(computers=(0,)), self.display)
        link = os.path.join(self.base_dir, '0', 'link.lua')
        self.assertEqual('main.lua', os.readlink(link))

    @unittest.skipIf(os.name == 'nt', 'symlinks need privileges on Windows')
    def test_file_replaces_a_symlink_on_the_computer(self):
        outside = os.path.join(shared.create_dir({'x': 'untouched'}), 'x')
        shared.write_files(self.base_dir, {'0/junk': ''})
        os.symlink(outside, os.path.join(self.base_dir, '0', 'main.lua'))
        copy_to_computers(self.config(computers=(0,)), self.display)
        dest = os.path.join(self.base_dir, '0', 'main.lua')
        self.assertFalse(os.path.islink(dest))
        shared.assert_contents(os.path.dirname(outside), {'x': 'untouched'})

    @unittest.skipIf(os.name == 'nt', 'read-only files can\'t be replaced')
    def test_read_only_files_are_overwritten(self):
        main_lua = os.path.join(self.source_dir, 'main.lua')
        os.chmod(main_lua, 0o444)
        copy_to_computers(self.config(computers=(0,)), self.display)
        os.chmod(main_lua, 0o644)
        shared.write_files(self.source_dir, {'main.lua': 'print("bye")'})
        os.chmod(main_lua, 0o444)
        copy_to_computers(self.config(computers=(0,)), self.display)
        self.assert_computer(0, {'main.lua': 'print("bye")',
                                 'lib/util.lua': 'return {}'})
