import sys

# The display classes deal with progress output from the copy runner. Each
# destination computer gets a handle from get_handle(), which is used as a
# context manager around that computer's copy. Entering the handle announces
# the copy, and everything the copier reports while it runs (one line per
# copied file) is passed to the handle's write() method.
#
# The NormalDisplay announces each computer and nothing else. The
# VerboseDisplay also prints every line written to the handle. The
# QuietDisplay prints nothing.
#
# Errors aren't the display's business. They're raised as PrintableErrors and
# printed in main.


class BaseDisplay:
    def __init__(self, output=None):
        self.output = output or sys.stdout
        # Every job/handle gets a unique id.
        self._next_job_id = 0
        # Each job has a title, like "computer 3".
        self.titles = {}

    def get_handle(self, title):
        job_id = self._next_job_id
        self._next_job_id += 1
        self.titles[job_id] = title
        return _DisplayHandle(self, job_id)

    # Callbacks that get overridden by subclasses.

    def _job_started(self, job_id):
        pass

    def _job_written(self, job_id, string):
        pass

    def _job_finished(self, job_id):
        pass

    # Callbacks for handles.

    def _handle_start(self, job_id):
        self._job_started(job_id)

    def _handle_write(self, job_id, string):
        self._job_written(job_id, string)

    def _handle_finish(self, job_id):
        self._job_finished(job_id)


class QuietDisplay(BaseDisplay):
    '''Prints nothing.'''
    pass


class NormalDisplay(BaseDisplay):
    '''Prints one line when each job starts. The line goes out before any work
    is done, so seeing it doesn't mean the copy succeeded.'''

    def _job_started(self, job_id):
        print('Copying to', self.titles[job_id], file=self.output)
        self.output.flush()


class VerboseDisplay(NormalDisplay):
    '''Like the NormalDisplay, but also echoes everything the job writes,
    indented under the job's title.'''

    def _job_written(self, job_id, string):
        for line in string.splitlines():
            print('  ' + line, file=self.output)


class _DisplayHandle:
    def __init__(self, display, job_id):
        self._display = display
        self._job_id = job_id
        self._opened = False
        self._closed = False

    def write(self, string):
        assert self._opened and not self._closed
        self._display._handle_write(self._job_id, string)

    # Context manager interface. Handles are only written to inside a with
    # statement, and only used once.
    def __enter__(self):
        assert not self._opened and not self._closed
        self._opened = True
        self._display._handle_start(self._job_id)
        return self

    def __exit__(self, *args):
        assert self._opened and not self._closed
        self._display._handle_finish(self._job_id)
        self._job_id = None
        self._closed = True
