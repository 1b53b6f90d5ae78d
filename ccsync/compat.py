import os
import sys


# Computed once at import time, so that a later chdir (which the tests do)
# can't break relative lookups of package resources like VERSION.
MODULE_ROOT = os.path.abspath(os.path.dirname(__file__))


def is_fancy_terminal():
    '''The Windows terminal does not support most of the fancy things we want
    to do with colors and formatting. This is a quick and dirty way to make
    sure we default to simple output on Windows.'''
    return sys.stdout.isatty() and os.name != 'nt'
