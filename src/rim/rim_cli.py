"""
RIM CLI Entrypoint.

This module provides the command-line interface for analyzing RIM source code.

Features:
    - Read source from `.rim` files or inline strings.
    - Lex and parse the code into a syntax tree.
    - Print the tree as an indented outline or as JSON, to the console or a file.
    - Dump the raw token stream instead of parsing.
    - Launch an interactive REPL.

Example usage:
    rim program.rim
    rim -s "a := III + b;" -f json
    rim program.rim -o tree.json -f json
    rim --tokens -s "if a > b then c := a;"
    rim --repl

Functions:
    run_rim(source, is_string=False, fmt="text", out=None, tokens=False, max_depth=64) -> str:
        Executes the RIM pipeline (lex → parse → render → output) and returns the rendered text.

    main(argv=None) -> None:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import json
import sys

from rim.rim_lexer import LexError, LexResult, tokenize
from rim.rim_parser import DEFAULT_MAX_DEPTH, RimError, SyntacticalAnalyzer
from rim.rim_tree import SyntaxNode, render_tree


def format_tree(tree: SyntaxNode, fmt: str = "text") -> str:
    """Renders a tree as an outline (`text`) or indented JSON (`json`)."""
    if fmt == "json":
        return json.dumps(tree.to_dict(), indent=2, ensure_ascii=False)
    return render_tree(tree)


def format_tokens(results: list[LexResult]) -> str:
    """One line per lexical result: location, kind and text, or the error."""
    lines: list[str] = []
    for result in results:
        if isinstance(result, LexError):
            lines.append(f"{result.line}:{result.col}\tERROR\t{result.message}")
        else:
            lines.append(f"{result.line}:{result.col}\t{result.kind}\t{result.text}")
    return "\n".join(lines)


def run_rim(
    source: str,
    is_string: bool = False,
    fmt: str = "text",
    out: str | None = None,
    tokens: bool = False,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> str:
    """
    Run the RIM toolchain: lex, parse, render, and print or write the output.

    Args:
        source (str): The RIM source code or path to a `.rim` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        fmt (str): Tree output format, 'text' or 'json'. Defaults to 'text'.
        out (str | None): Optional path to write the output to. If None, prints to stdout.
        tokens (bool): If True, outputs the token stream instead of the tree.
        max_depth (int): Nesting limit handed to the analyzer.

    Returns:
        str: The rendered output.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.rim'.
        LexicalError: If the source contains lexical errors (not raised with `tokens`).
        RimSyntaxError: If the source is structurally invalid.
    """
    if not is_string and not source.endswith(".rim"):
        raise ValueError("Only .rim files are supported.")
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    results = tokenize(source)
    if tokens:
        output = format_tokens(results)
    else:
        tree = SyntacticalAnalyzer(max_depth).analyze(results)
        output = format_tree(tree, fmt)

    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(output + "\n")
        print(f"[ok] >>> wrote {out}")
    else:
        print(output)
    return output


def main(argv: list[str] | None = None) -> None:
    """
    Entry point for the RIM CLI.

    Launches the REPL if no arguments are passed or `--repl` is specified,
    otherwise analyzes the given source. Lexical and syntax errors are printed
    to stderr and the process exits with status 1.
    """
    args_list = sys.argv[1:] if argv is None else argv
    if not args_list:
        from rim.rim_repl import start_repl

        start_repl()
        return

    parser = argparse.ArgumentParser(prog="rim")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=("text", "json"),
        default="text",
        help="Tree output format (default: text)",
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "--tokens", action="store_true", help="Print the token stream instead of the tree"
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum nesting depth (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--repl", action="store_true", help="Launch interactive REPL instead"
    )

    args = parser.parse_args(args_list)
    if args.max_depth < 1:
        parser.error("--max-depth must be positive")

    if args.repl or args.source is None:
        from rim.rim_repl import start_repl

        start_repl(max_depth=args.max_depth, fmt=args.fmt)
        return

    try:
        run_rim(
            source=args.source,
            is_string=args.string,
            fmt=args.fmt,
            out=args.out,
            tokens=args.tokens,
            max_depth=args.max_depth,
        )
    except (RimError, ValueError, OSError) as e:
        print(f"[error] >>> {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
