"""
Error handling utilities for the module bundler.
"""


class BundleError(Exception):
    """Base exception for bundling errors, optionally tied to a file, a position and a hint."""
    def __init__(self, message, line_number=None, column=None, context=None, suggestion=None, path=None):
        self.message = message
        self.path = path  # Source file or bundle the error is about
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending line
        self.suggestion = suggestion  # How to fix it
        super().__init__(self._format_error())

    def location(self):
        """Where the error happened, e.g. 'src/a.js, line 3:7', or '' when unknown."""
        parts = []
        if self.path:
            parts.append(self.path)
        if self.line_number:
            position = f"line {self.line_number}"
            if self.column:
                position += f":{self.column}"
            parts.append(position)
        return ", ".join(parts)

    def _format_error(self):
        header = "❌ Bundle error"
        where = self.location()
        if where:
            header += f" ({where})"

        lines = ["", header, f"   {self.message}"]
        if self.context:
            lines.append(f"   | {self.context}")
        if self.suggestion:
            lines.append(f"   💡 {self.suggestion}")
        return "\n".join(lines) + "\n"


class MissingSourceError(BundleError):
    """A configured source file does not exist. Recoverable: the file is skipped."""
    def __init__(self, path):
        super().__init__(
            f'Source file "{path}" not found.',
            suggestion="Check the file list of this target",
            path=path,
        )


class UnreadableSourceError(BundleError):
    """A source file exists but cannot be read as UTF-8 text."""
    def __init__(self, path, reason):
        self.reason = reason
        super().__init__(
            f'Source file "{path}" cannot be read: {reason}',
            suggestion="Module files must be UTF-8 encoded text",
            path=path,
        )


class UnresolvedModuleError(BundleError):
    """One or more require() calls name a module that was never defined."""
    def __init__(self, module_names):
        self.module_names = list(module_names)
        names = ", ".join(f"[{name}]" for name in self.module_names)
        noun = "Module" if len(self.module_names) == 1 else "Modules"
        super().__init__(
            f"{noun} {names} not found",
            suggestion="Add the file defining it to the target or fix the require() name",
        )


class DuplicateModuleError(BundleError):
    """Two files of the same target resolve to the same module name."""
    def __init__(self, module_name, path, previous_path=None):
        self.module_name = module_name
        self.previous_path = previous_path
        where = f' (already defined by "{previous_path}")' if previous_path else ""
        super().__init__(
            f'Module [{module_name}] in "{path}" is defined twice{where}',
            suggestion="Give one of the modules another name in define()",
            path=path,
        )


class MalformedModuleError(BundleError):
    """A module source has no closing parenthesis for its define() call."""
    def __init__(self, path=None):
        super().__init__(
            "No closing parenthesis found for define()",
            suggestion="Every module file must wrap its body in define(...)",
            path=path,
        )


class MalformedBundleError(BundleError):
    """The assembled bundle could not be parsed by the formatter."""


class TaskConfigError(BundleError):
    """The task configuration file is missing or invalid."""


def get_line_context(source, line_number):
    """Return line `line_number` (1-based) of source without surrounding whitespace, or None."""
    if not source or line_number is None or line_number < 1:
        return None
    lines = source.splitlines()
    if line_number > len(lines):
        return None
    return lines[line_number - 1].strip()
