import argparse
import os
import shutil
import sys
from typing import List, Optional

from tqdm import tqdm

from . import color_console as cc
from .config import Config
from .exceptions import ConfigError
from .options import ConfigOptions

__version__ = "1.0.0"

CONFIG_EXTENSIONS = (".yml", ".yaml")


def merge_configs(source: Config, target: Config) -> int:
    """Copies every key-value pair of `source` into `target`.

    Values from `source` win. Comments, blank lines and the order of keys
    already in `target` are kept; keys new to `target` are appended to their
    section.

    Returns:
        The number of keys whose value in `target` changed.
    """
    changed = 0
    for path, value in source.entries():
        if target.put(path, value) != value:
            changed += 1
    return changed


def process_directories(input_dir, output_dir, no_overwrite=False, quiet=False, dry_run=False,
                        options: Optional[ConfigOptions] = None):
    """Walks through an input directory and syncs config files into the output.

    This function recursively scans the `input_dir`. For each `.yml` or
    `.yaml` file found, it either copies it to the corresponding location in
    `output_dir` or, if a file already exists at the destination, merges the
    input's entries into it with `merge_configs` and saves the result.

    Args:
        input_dir (str): The path to the source directory.
        output_dir (str): The path to the destination directory.
        no_overwrite (bool, optional): If True, existing files in the output
            directory will not be merged into. Defaults to False.
        quiet (bool, optional): If True, suppresses all informational messages
            and the progress bar. Defaults to False.
        dry_run (bool, optional): If True, simulates the process without
            writing any files. Defaults to False.
        options (ConfigOptions, optional): Settings used to read and write
            the merged files.
    """
    def log(message: str):
        """Prints a message above the progress bar unless in quiet mode."""
        if not quiet:
            tqdm.write(message)

    jobs = []
    for root, dirs, files in os.walk(input_dir):
        # Create corresponding directories in the output
        relative_path = os.path.relpath(root, input_dir)
        output_root = os.path.join(output_dir, relative_path)
        if not os.path.exists(output_root):
            log(f"Creating directory '{output_root}'")
            if not dry_run:
                os.makedirs(output_root)

        for file in sorted(files):
            if file.endswith(CONFIG_EXTENSIONS):
                jobs.append((os.path.join(root, file), os.path.join(output_root, file), file))

    for input_path, output_path, file in tqdm(jobs, desc="Syncing", unit="file", disable=quiet):
        if os.path.exists(output_path):
            if no_overwrite:
                log(f"Skipping existing file '{output_path}'")
                continue

            log(f"Merging '{input_path}' into '{output_path}'...")
            if not dry_run:
                try:
                    source = Config(options)
                    source.load(input_path)
                    target = Config(options)
                    target.load(output_path)
                    merge_configs(source, target)
                    target.save(output_path)
                except ConfigError as e:
                    cc.print_error(f"Error merging file {file}: {e}")
        else:
            log(f"Copying '{input_path}' to '{output_path}'...")
            if not dry_run:
                shutil.copy2(input_path, output_path)


def _load(path: str, options: ConfigOptions) -> Config:
    config = Config(options)
    config.load(path)
    return config


def _cmd_get(args: argparse.Namespace, options: ConfigOptions) -> int:
    value = _load(args.file, options).get(args.key)
    if value is None:
        cc.print_error(f"Key '{args.key}' not found in '{args.file}'")
        return 1
    print(value)
    return 0


def _cmd_set(args: argparse.Namespace, options: ConfigOptions) -> int:
    if os.path.exists(args.file):
        config = _load(args.file, options)
    else:
        cc.print_info(f"Creating '{args.file}'", quiet=args.quiet)
        config = Config(options)
    previous = config.put(args.key, args.value, args.comment)
    config.save(args.file)
    if previous is None:
        cc.print_success(f"Set '{args.key}' to '{args.value}'", quiet=args.quiet)
    else:
        cc.print_success(f"Changed '{args.key}' from '{previous}' to '{args.value}'", quiet=args.quiet)
    return 0


def _cmd_unset(args: argparse.Namespace, options: ConfigOptions) -> int:
    config = _load(args.file, options)
    previous = config.remove(args.key)
    if previous is None:
        cc.print_warning(f"Key '{args.key}' has no value in '{args.file}'", quiet=args.quiet)
        return 1
    config.save(args.file)
    cc.print_success(f"Removed value of '{args.key}'", quiet=args.quiet)
    return 0


def _cmd_kill(args: argparse.Namespace, options: ConfigOptions) -> int:
    config = _load(args.file, options)
    if config.get_node(args.key) is None:
        cc.print_warning(f"Key '{args.key}' not found in '{args.file}'", quiet=args.quiet)
        return 1
    before = config.size()
    config.kill(args.key)
    config.save(args.file)
    cc.print_success(f"Removed '{args.key}' and {before - config.size()} value(s)", quiet=args.quiet)
    return 0


def _cmd_list(args: argparse.Namespace, options: ConfigOptions) -> int:
    for key, value in _load(args.file, options).entries():
        print(f"{key}={value}")
    return 0


def _cmd_show(args: argparse.Namespace, options: ConfigOptions) -> int:
    cc.print_document(_load(args.file, options).save_to_text(), args.file, quiet=args.quiet)
    return 0


def _cmd_check(args: argparse.Namespace, options: ConfigOptions) -> int:
    failures = 0
    for path in args.files:
        try:
            config = _load(path, options)
        except ConfigError as e:
            cc.print_error(f"'{path}': {e}")
            failures += 1
            continue
        cc.print_success(f"'{path}': OK ({config.size()} keys)", quiet=args.quiet)
    return 1 if failures else 0


def _cmd_sync(args: argparse.Namespace, options: ConfigOptions) -> int:
    if not os.path.isdir(args.input_dir):
        cc.print_error(f"Error: Input directory not found at '{args.input_dir}'")
        return 1
    process_directories(args.input_dir, args.output_dir, args.no_overwrite, args.quiet, args.dry_run, options)
    cc.print_success("\nProcessing complete.", quiet=args.quiet)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Builds the argument parser with one subcommand per operation."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--indent", type=int, default=None,
                        help="Spaces per nesting level when writing (default: detected from the file, else 2).")
    common.add_argument("-q", "--quiet", action="store_true", help="Suppress informational messages.")
    common.add_argument("--debug", action="store_true", help="Print diagnostic messages to stderr.")

    parser = argparse.ArgumentParser(
        description="Read and edit indentation-structured config files without losing comments.",
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="Example usage:\n"
               "  indent-config get settings.yml server.port\n"
               "  indent-config set settings.yml server.port 8080 --comment 'default port'\n"
               "  indent-config sync ./defaults ./deployed --dry-run"
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get", parents=[common], help="Print the value of a key.")
    get_parser.add_argument("file")
    get_parser.add_argument("key")
    get_parser.set_defaults(func=_cmd_get)

    set_parser = subparsers.add_parser("set", parents=[common], help="Set the value of a key.")
    set_parser.add_argument("file")
    set_parser.add_argument("key")
    set_parser.add_argument("value")
    set_parser.add_argument("--comment", default=None, help="Trailing comment for the key's line.")
    set_parser.set_defaults(func=_cmd_set)

    unset_parser = subparsers.add_parser("unset", parents=[common], help="Clear a key's value, keeping nested keys.")
    unset_parser.add_argument("file")
    unset_parser.add_argument("key")
    unset_parser.set_defaults(func=_cmd_unset)

    kill_parser = subparsers.add_parser("kill", parents=[common], help="Remove a key and everything nested below it.")
    kill_parser.add_argument("file")
    kill_parser.add_argument("key")
    kill_parser.set_defaults(func=_cmd_kill)

    list_parser = subparsers.add_parser("list", parents=[common], help="Print every key=value pair.")
    list_parser.add_argument("file")
    list_parser.set_defaults(func=_cmd_list)

    show_parser = subparsers.add_parser("show", parents=[common], help="Print the file as it would be saved.")
    show_parser.add_argument("file")
    show_parser.set_defaults(func=_cmd_show)

    check_parser = subparsers.add_parser("check", parents=[common], help="Check that files parse.")
    check_parser.add_argument("files", nargs="+")
    check_parser.set_defaults(func=_cmd_check)

    sync_parser = subparsers.add_parser("sync", parents=[common], help="Recursively copy and merge config files.")
    sync_parser.add_argument("input_dir", help="The input directory.")
    sync_parser.add_argument("output_dir", help="The output directory.")
    sync_parser.add_argument("-n", "--no-overwrite", action="store_true",
                             help="Do not merge into existing files in the output directory.")
    sync_parser.add_argument("--dry-run", action="store_true",
                             help="Show what would be done without actually modifying files.")
    sync_parser.set_defaults(func=_cmd_sync)

    return parser


def main(argv: Optional[List[str]] = None):
    """Parses command-line arguments and runs the selected subcommand.

    Exits with status 1 if the subcommand reports a failure or a config
    error is raised.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = ConfigOptions(
            spaces_per_indent=2 if args.indent is None else args.indent,
            detect_indent=args.indent is None,
            debug=args.debug,
        )
        code = args.func(args, options)
    except ConfigError as e:
        cc.print_error(f"Error: {e}")
        sys.exit(1)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
