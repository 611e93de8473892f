import argparse
import sys
import os
import json
import re

from builder import build_target, run_task, set_verbose, log, error
from modpack.config import CONFIG_FILE, BuildOptions, load_task_config
from modpack.errors import BundleError


SEPARATOR_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '\\': '\\'}

def unescape_separator(text):
    r"""Allow --separator '\n\n' on the command line. Only \n, \t, \r and \\ are unescaped."""
    return re.sub(r'\\([ntr\\])', lambda m: SEPARATOR_ESCAPES[m.group(1)], text)

def cmd_build(args):
    """Build targets from the task configuration file."""
    config_path = args.config
    try:
        config = load_task_config(config_path)
        root = os.path.dirname(os.path.abspath(config_path))
        failures = run_task(config, args.targets, root=root, fail_fast=args.fail_fast)
    except BundleError as e:
        error(f"Build failed:{e}")
        sys.exit(1)

    if failures:
        error(f"{failures} bundle(s) failed.")
        sys.exit(1)

def cmd_bundle(args):
    """Bundle the files given on the command line into one output."""
    options = BuildOptions(
        base=args.base,
        entrance=args.entrance,
        separator=unescape_separator(args.separator),
        duplicates="error" if args.strict_names else "warn",
    )
    try:
        build_target(args.files, args.output, options)
    except BundleError as e:
        error(f'Bundle "{args.output}" failed:{e}')
        sys.exit(1)

def cmd_init(args):
    log("Initializing project...")
    os.makedirs("src", exist_ok=True)
    with open(os.path.join("src", "math.js"), "w") as f:
        f.write('define("math", function (require, exports) {\n'
                '    exports.add = function (a, b) { return a + b; };\n'
                '});\n')
    with open(os.path.join("src", "main.js"), "w") as f:
        f.write('define("main", function (require) {\n'
                '    var math = require("math");\n'
                '    return math.add(1, 2);\n'
                '});\n')
    config = {
        "options": {"base": "src", "entrance": "main"},
        "targets": {
            "dist": {"files": [{"src": ["src/**/*.js"], "dest": "dist/bundle.js"}]}
        }
    }
    with open(CONFIG_FILE, "w") as f:
        json.dump(config, f, indent=2)
    log(f"Created {CONFIG_FILE}, src/math.js and src/main.js")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Bundle define()/require() modules into one file")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output (sent to stderr)")
    subparsers = parser.add_subparsers(dest="command")

    build = subparsers.add_parser("build", help="Build targets from the task configuration")
    build.add_argument("targets", nargs="*", help="Targets to build (default: all)")
    build.add_argument("-c", "--config", default=CONFIG_FILE, help=f"Task configuration file (default: {CONFIG_FILE})")
    build.add_argument("--fail-fast", action="store_true", help="Stop at the first failing bundle")

    bundle = subparsers.add_parser("bundle", help="Bundle files given on the command line")
    bundle.add_argument("files", nargs="+", help="Module files, in slot order")
    bundle.add_argument("-o", "--output", required=True, help="Bundle file to write")
    bundle.add_argument("--base", default="./", help="Base directory for path-derived module names")
    bundle.add_argument("--entrance", help="Only expose this module through use()")
    bundle.add_argument("--separator", default="\\n", help="Text inserted between modules (default: newline)")
    bundle.add_argument("--strict-names", action="store_true", help="Fail on duplicate module names instead of warning")

    subparsers.add_parser("init", help="Create a sample project")

    args = parser.parse_args(argv)
    set_verbose(args.verbose)

    if args.command == "build": cmd_build(args)
    elif args.command == "bundle": cmd_bundle(args)
    elif args.command == "init": cmd_init(args)
    else: parser.print_help()

if __name__ == "__main__":
    main()
