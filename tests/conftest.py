"""
Shared fixtures for the bundler tests.
"""
import os
import sys
import tempfile

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


@pytest.fixture
def project():
    """A temporary project directory with a helper to write module files into it."""
    with tempfile.TemporaryDirectory() as tmpdir:

        def write(relpath, content):
            path = os.path.join(tmpdir, relpath)
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'w') as f:
                f.write(content)
            return relpath

        write.root = tmpdir
        yield write
