"""Command-line front door for ctxselect.

Parses CLI options, loads the tree, restores an optional template, runs the
interactive selector, and delivers the rendered document.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pyperclip

from . import config
from .errors import CtxSelectError, format_error, wrap_os_error
from .logging import configure_logging, get_logger, log_event
from .output.formatter import OUTPUT_FORMATS, OutputDocument, build_document
from .session import SelectionSession
from .templates.store import PromptStore, TemplateStore
from .tree_model.fs import load_tree
from .ui_theme import resolve_theme, theme_names

EXIT_OK = 0
EXIT_FAILURE = 1

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ctxselect",
        description="Select files from a directory tree and emit them as one LLM context document.",
    )
    parser.add_argument("directory", nargs="?", default=None, help="Root directory. Defaults to the current directory.")
    parser.add_argument("-t", "--template", metavar="NAME", help="Start from a saved selection template.")
    parser.add_argument("-s", "--search", metavar="QUERY", help="Start with a name search.")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default=None, help="Output format (default: from config).")
    prompt_group = parser.add_mutually_exclusive_group()
    prompt_group.add_argument("--prompt", metavar="TEXT", help="Instructions appended to the document.")
    prompt_group.add_argument("--prompt-name", metavar="NAME", help="Use a saved prompt as instructions.")
    parser.add_argument("--save-prompt", metavar="NAME", help="Save the --prompt text under NAME.")
    parser.add_argument("--output", metavar="FILE", help="Write the document to FILE instead of stdout.")
    parser.add_argument("--copy", action="store_true", help="Copy the document to the clipboard.")
    parser.add_argument("--show-hidden", action="store_true", help="Include dotfiles.")
    parser.add_argument("--no-gitignore", action="store_true", help="Include gitignored paths.")
    parser.add_argument("--no-ui", action="store_true", help="Emit the --template selection without the UI.")
    parser.add_argument("--list-templates", action="store_true", help="List saved templates and exit.")
    parser.add_argument("--delete-template", metavar="NAME", help="Delete a saved template and exit.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(theme_names())}).",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colors in the UI.")
    parser.add_argument("--log-level", default="info", help="Log level for the ctxselect log file.")
    return parser


def _print_err(message: str) -> None:
    print(message, file=sys.stderr)


def _resolve_prompt(args: argparse.Namespace, prompts: PromptStore) -> str:
    if args.prompt is not None:
        if args.save_prompt:
            prompts.save(args.save_prompt, args.prompt)
        return args.prompt
    if args.prompt_name:
        text = prompts.load(args.prompt_name)
        if text is None:
            _print_err(f"Prompt not found: {args.prompt_name}")
            return ""
        return text
    return ""


def deliver(document: OutputDocument, *, output: str | None, copy: bool) -> None:
    """Send the document to the clipboard, a file, or stdout.

    An unwritable ``output`` path raises the matching ``CtxSelectError``.
    """
    if copy:
        pyperclip.copy(document.text.replace("\x00", ""))
        _print_err(f"Copied {document.file_count} files to the clipboard.")
        return
    if output:
        target = Path(output)
        try:
            target.write_text(document.text, encoding="utf-8")
        except OSError as exc:
            raise wrap_os_error(exc, target) from exc
        _print_err(f"Wrote {document.file_count} files to {output}.")
        return
    sys.stdout.write(document.text)
    sys.stdout.flush()


def main(argv: list[str] | None = None) -> int:
    """Run ctxselect and return the process exit code.

    Exit codes: ``0`` after delivering a document or on an explicit quit
    (nothing is written), ``1`` when the tree cannot be loaded.
    """
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level)
    templates = TemplateStore()
    prompts = PromptStore()

    try:
        if args.list_templates:
            for name in templates.list():
                print(name)
            return EXIT_OK
        if args.delete_template:
            if templates.delete(args.delete_template):
                _print_err(f"Deleted template {args.delete_template}")
                return EXIT_OK
            _print_err(f"Template not found: {args.delete_template}")
            return EXIT_FAILURE
        prompt = _resolve_prompt(args, prompts)
    except CtxSelectError as exc:
        _print_err(format_error(exc))
        return EXIT_FAILURE

    show_hidden = args.show_hidden or config.load_show_hidden()
    skip_gitignored = not args.no_gitignore and config.load_skip_gitignored()
    root_path = Path(args.directory) if args.directory else Path.cwd()
    try:
        root = load_tree(root_path, show_hidden=show_hidden, skip_gitignored=skip_gitignored)
    except CtxSelectError as exc:
        _print_err(format_error(exc))
        log_event(logger, "cli.tree_load_failed", root=str(root_path), error=str(exc))
        return EXIT_FAILURE

    session = SelectionSession(
        root,
        output_format=args.format or config.load_output_format(),
        prompt=prompt,
    )

    if args.template:
        session.load_template(templates, args.template)
        if session.status:
            _print_err(session.status)
        for missing in session.template_missing:
            _print_err(f"  missing: {missing}")
    if args.search:
        session.start_search(args.search)

    if args.no_ui:
        if not args.template:
            _print_err("--no-ui requires --template")
            return EXIT_FAILURE
        finished_root = session.tree
        selection = session.selection
        output_format = session.output_format
        prompt_text = session.prompt
        pending_name = None
    else:
        # Imported here so --no-ui runs never touch termios.
        from .runtime.app import run_selector

        theme = resolve_theme(args.theme or config.load_theme_name(), no_color=args.no_color)
        result = run_selector(
            session,
            theme=theme,
            template_store=templates,
            show_hidden=show_hidden,
            skip_gitignored=skip_gitignored,
        )
        if not result.finished:
            return EXIT_OK
        finished_root = result.root
        selection = result.selection
        output_format = result.output_format
        prompt_text = result.prompt
        pending_name = result.pending_template_name

    if pending_name:
        try:
            templates.save(pending_name, session.template_entries())
            _print_err(f"Saved template {pending_name}")
        except CtxSelectError as exc:
            _print_err(format_error(exc))

    document = build_document(
        finished_root,
        selection,
        output_format=output_format,
        prompt=prompt_text,
    )
    for failure in document.failures:
        _print_err(f"Could not read {failure.relative_path}: {failure.message}")
    try:
        deliver(document, output=args.output, copy=args.copy)
    except CtxSelectError as exc:
        _print_err(format_error(exc))
        log_event(logger, "cli.deliver_failed", output=args.output, error=str(exc))
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
