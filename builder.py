import sys
import os

from modpack.assembler import assemble, entry_point_map
from modpack.config import BuildOptions
from modpack.errors import (
    BundleError,
    DuplicateModuleError,
    MissingSourceError,
    UnreadableSourceError,
)
from modpack.formatter import format_source
from modpack.naming import get_module_name
from modpack.registry import ModuleRegistry
from modpack.resolver import resolve_requires
from modpack.transformer import transform_definition

# Global verbose flag
_VERBOSE = False

def set_verbose(value):
    """Set the global verbose flag."""
    global _VERBOSE
    _VERBOSE = value

def debug_log(message):
    """Log a debug message to stderr if verbose mode is enabled."""
    if _VERBOSE:
        print(f"\033[94mDEBUG:\033[0m {message}", file=sys.stderr)

def log(message):
    """Log informational messages to stderr."""
    print(f"\033[92m\033[1mINFO:\033[0m {message}", file=sys.stderr)

def warn(message):
    """Log a recoverable problem to stderr."""
    print(f"\033[93m\033[1mWARNING:\033[0m {message}", file=sys.stderr)

def error(message):
    """Log a fatal problem to stderr."""
    print(f"\033[91m\033[1mERROR:\033[0m {message}", file=sys.stderr)

def cyan(text):
    return f"\033[96m{text}\033[0m"


def read_source(filepath, root="."):
    """
    Read a module file and prefix it with a comment naming the file.

    Raises:
        MissingSourceError: If the file does not exist
        UnreadableSourceError: If the file cannot be read or is not UTF-8
    """
    full_path = os.path.join(root, filepath)
    if not os.path.isfile(full_path):
        raise MissingSourceError(filepath)
    try:
        with open(full_path, 'r', encoding='utf-8') as f:
            contents = f.read()
    except UnicodeDecodeError as e:
        raise UnreadableSourceError(filepath, f"invalid UTF-8 byte at offset {e.start}")
    except OSError as e:
        raise UnreadableSourceError(filepath, e.strerror or str(e))
    return f"//{filepath}\n" + contents


def write_bundle(dest, source):
    """Write the bundle, creating parent directories as needed."""
    parent = os.path.dirname(dest)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(dest, 'w', encoding='utf-8') as f:
        f.write(source)


def bundle_sources(src_paths, options=None, root="."):
    """
    Run the bundling pipeline over one ordered list of module files.

    Args:
        src_paths: Module file paths, relative to root, in slot order
        options: BuildOptions (defaults when None)
        root: Directory that relative paths and options.base are resolved against

    Returns:
        (bundle_source, registry)

    Raises:
        BundleError: On any error that must abort this target
    """
    options = options or BuildOptions()
    base = os.path.join(root, options.base)
    registry = ModuleRegistry()
    defined_in = {}
    transformed = []

    # STEP 1: NAME, RECORD AND TRANSFORM EACH MODULE
    for filepath in src_paths:
        try:
            source = read_source(filepath, root)
        except MissingSourceError as e:
            warn(e.message)
            continue

        module_name = get_module_name(base, os.path.join(root, filepath), source)
        if module_name in registry:
            duplicate = DuplicateModuleError(module_name, filepath, defined_in.get(module_name))
            if options.duplicates == "error":
                raise duplicate
            warn(f"{duplicate.message}; the later definition wins")

        slot = registry.record(module_name)
        defined_in[module_name] = filepath
        debug_log(f"Module [{module_name}] -> slot {slot} ({filepath})")
        transformed.append(transform_definition(slot, source, path=filepath))

    # STEP 2: CONCATENATE AND RESOLVE REQUIRES ACROSS THE WHOLE BUNDLE
    combined = options.separator.join(transformed)
    result = resolve_requires(combined, registry)
    if result.is_err():
        raise result.error

    # STEP 3: WRAP IN THE RUNTIME LOADER AND ENTRY HELPER
    if options.entrance is not None and options.entrance not in registry:
        warn(f"Entrance module [{options.entrance}] not found; use() exposes all modules")
    debug_log(f"use() exposes: {sorted(entry_point_map(registry, options.entrance))}")
    assembled = assemble(result.value, registry, options.entrance)

    # STEP 4: CANONICAL FORMATTING
    return format_source(assembled), registry


def build_target(src_paths, dest, options=None, root="."):
    """
    Bundle one file set and write it to dest.

    Nothing is written when bundling fails.

    Returns:
        The ModuleRegistry of the target
    """
    bundle, registry = bundle_sources(src_paths, options, root)
    write_bundle(os.path.join(root, dest), bundle)
    log(f'Concatenated {cyan(len(registry))} modules, file "{dest}" created.')
    return registry


def run_task(config, target_names=None, root=".", fail_fast=False):
    """
    Build the requested targets of a task configuration.

    Each file set gets its own registry. A failing file set is reported and
    the remaining ones still run, unless fail_fast is set.

    Returns:
        Number of file sets that failed
    """
    if not target_names:
        target_names = list(config.targets)

    unknown = [name for name in target_names if name not in config.targets]
    if unknown:
        raise BundleError(
            f"Unknown target(s): {', '.join(unknown)}",
            suggestion=f"Available targets: {', '.join(config.targets)}",
        )

    failures = 0
    for target_name in target_names:
        options = config.options_for(target_name)
        debug_log(f"Target '{target_name}' with options {options.model_dump()}")
        for file_set in config.targets[target_name].files:
            src_paths = file_set.expand(root)
            try:
                build_target(src_paths, file_set.dest, options, root)
            except BundleError as e:
                error(f'Bundle "{file_set.dest}" of target \'{target_name}\' failed:{e}')
                failures += 1
                if fail_fast:
                    return failures
    return failures
