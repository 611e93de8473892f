# Module bundler - core components
"""
Core modules for the define()/require() bundler:
- errors: Error types with formatted messages
- naming: Module names from define() literals or file paths
- registry: Name -> slot assignment for one bundle
- transformer: define(...) -> module table assignment
- resolver: require("name") -> slot lookups
- assembler: Runtime loader and use() entry helper
- grammar: Lark grammar for reading assembled bundles
- formatter: Canonical re-printing of bundles
- config: Task configuration models
"""

from .errors import BundleError
from .naming import get_module_name
from .registry import ModuleRegistry
from .transformer import transform_definition
from .resolver import resolve_requires
from .assembler import assemble
from .formatter import format_source

__all__ = [
    'BundleError',
    'get_module_name',
    'ModuleRegistry',
    'transform_definition',
    'resolve_requires',
    'assemble',
    'format_source',
]
