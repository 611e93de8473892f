# Bundle runtime templates
"""
JavaScript templates that get spliced into every bundle.

These are real .js files so they can be read and linted as code, and are
loaded as text at build time:

- loader.js: the module table object with its memoizing r(slot) resolver.
  `$name` is the table name, `$source;` the point where modules are inserted.
- use.js: the entry-point helper. `$mapping` is the exposed name -> slot map.
"""

import os

RUNTIME_DIR = os.path.dirname(__file__)


def _read_template(filename):
    path = os.path.join(RUNTIME_DIR, filename)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def get_loader_template():
    """Return the module loader template."""
    return _read_template('loader.js')


def get_use_template():
    """Return the use(name) entry helper template."""
    return _read_template('use.js')
