"""
Task configuration: which files go into which bundle, and with what options.

The configuration file is JSON shaped like a grunt multi-task:

    {
      "options": {"base": "src"},
      "targets": {
        "dist": {
          "options": {"entrance": "main"},
          "files": [{"src": ["src/**/*.js"], "dest": "dist/bundle.js"}]
        }
      }
    }

A top-level "files" list is shorthand for a single target named "default".
"""
import glob
import json
import os
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from modpack.errors import TaskConfigError

CONFIG_FILE = "dependence.json"
DEFAULT_TARGET = "default"


class BuildOptions(BaseModel):
    """Options consumed by the bundling pipeline."""
    model_config = ConfigDict(extra='forbid')

    base: str = "./"
    entrance: Optional[str] = None
    separator: str = "\n"
    duplicates: Literal["warn", "error"] = "warn"


class FileSet(BaseModel):
    """An ordered list of source patterns and the bundle they produce."""
    model_config = ConfigDict(extra='forbid')

    src: List[str]
    dest: str

    @field_validator('src', mode='before')
    @classmethod
    def _single_pattern(cls, value):
        if isinstance(value, str):
            return [value]
        return value

    def expand(self, root="."):
        """Resolve src patterns into file paths relative to root, in order."""
        return expand_sources(self.src, root)


class Target(BaseModel):
    """A named build target: option overrides plus its file sets."""
    model_config = ConfigDict(extra='forbid')

    options: Dict[str, Any] = Field(default_factory=dict)
    files: List[FileSet]


class TaskConfig(BaseModel):
    """The whole task file."""
    model_config = ConfigDict(extra='forbid')

    options: BuildOptions = Field(default_factory=BuildOptions)
    targets: Dict[str, Target]

    @model_validator(mode='before')
    @classmethod
    def _files_shorthand(cls, data):
        if isinstance(data, dict) and 'files' in data and 'targets' not in data:
            data = dict(data)
            data['targets'] = {DEFAULT_TARGET: {'files': data.pop('files')}}
        return data

    def options_for(self, target_name):
        """Task-level options with the target's overrides applied."""
        target = self.targets[target_name]
        merged = {**self.options.model_dump(), **target.options}
        try:
            return BuildOptions(**merged)
        except ValidationError as e:
            raise TaskConfigError(
                f"Invalid options for target '{target_name}': {e.errors()[0]['msg']}",
                context=str(target.options),
            )


def _has_magic(pattern):
    return any(ch in pattern for ch in '*?[')


def expand_sources(patterns, root="."):
    """
    Expand source patterns the way the task runner does.

    Glob patterns (with ** for recursion) are expanded and sorted, a leading
    '!' removes matching paths, and literal paths are kept even if the file
    is missing so that the caller can warn about it. Each path appears once,
    at its first position.
    """
    paths = []
    for pattern in patterns:
        if pattern.startswith('!'):
            excluded = set(_match(pattern[1:], root))
            paths = [p for p in paths if p not in excluded]
            continue
        for path in _match(pattern, root):
            if path not in paths:
                paths.append(path)
    return paths


def _match(pattern, root):
    if not _has_magic(pattern):
        return [os.path.normpath(pattern)]
    matches = glob.glob(os.path.join(root, pattern), recursive=True)
    return sorted(
        os.path.normpath(os.path.relpath(m, root))
        for m in matches
        if os.path.isfile(m)
    )


def load_task_config(path=CONFIG_FILE):
    """
    Load and validate a task configuration file.

    Raises:
        TaskConfigError: If the file is missing, is not JSON, or does not
            match the expected shape
    """
    if not os.path.exists(path):
        raise TaskConfigError(
            f"Configuration file '{path}' not found",
            suggestion="Run 'dependence init' to create one",
        )

    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise TaskConfigError(
                f"Configuration file '{path}' is not valid JSON: {e.msg}",
                line_number=e.lineno,
                column=e.colno,
            )

    try:
        return TaskConfig.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first['loc'])
        raise TaskConfigError(
            f"Invalid configuration in '{path}': {location}: {first['msg']}",
            suggestion="Each target needs a 'files' list of {\"src\": [...], \"dest\": \"...\"}",
        )
