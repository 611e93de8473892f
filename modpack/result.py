"""
Outcome of a bundling step that can fail without raising.

A step returns Ok(value) or Err(error) where error is a BundleError; the caller
decides whether the error aborts the target, usually by calling unwrap().
"""


class Result:
    """Base class of Ok and Err."""
    __slots__ = ()
    ok = False

    def is_ok(self) -> bool:
        return self.ok

    def is_err(self) -> bool:
        return not self.ok


class Ok(Result):
    """A step that succeeded with a value."""
    __slots__ = ('value',)
    ok = True

    def __init__(self, value):
        self.value = value

    def unwrap(self):
        return self.value

    def unwrap_or(self, default):
        return self.value

    def __repr__(self):
        text = repr(self.value)
        if len(text) > 60:
            text = text[:57] + '...'
        return f"Ok({text})"


class Err(Result):
    """A step that failed; carries the BundleError describing why."""
    __slots__ = ('error',)

    def __init__(self, error):
        self.error = error

    def unwrap(self):
        """Raise the carried error."""
        raise self.error

    def unwrap_or(self, default):
        return default

    def __repr__(self):
        return f"Err({type(self.error).__name__}: {getattr(self.error, 'message', self.error)})"
