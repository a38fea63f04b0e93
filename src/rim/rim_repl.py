import io
import traceback

from rim.rim_cli import format_tokens, format_tree
from rim.rim_lexer import tokenize
from rim.rim_parser import DEFAULT_MAX_DEPTH, RimError, SyntacticalAnalyzer


def parentheses_balanced(text: str) -> bool:
    """True when every `(` in `text` is closed and no `)` comes unopened."""
    balance = 0
    for char in text:
        if char == "(":
            balance += 1
        elif char == ")":
            balance -= 1
        if balance < 0:
            return False
    return balance == 0


def is_complete(src: str) -> bool:
    """A buffer is ready to analyze once it ends a statement with balanced brackets."""
    stripped = src.strip()
    return stripped.endswith(";") and parentheses_balanced(stripped)


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def analyze_and_print(
    src: str, analyzer: SyntacticalAnalyzer, fmt: str = "text", tokens: bool = False
) -> bool:
    """Analyzes one buffer and prints the result; returns False on a RIM error."""
    results = tokenize(src)
    if tokens:
        print("[tokens] >>>")
        print(format_tokens(results))
    try:
        tree = analyzer.analyze(results)
    except RimError as e:
        print(f"[error] >>> {e}")
        return False
    print(format_tree(tree, fmt))
    return True


def start_repl(max_depth: int = DEFAULT_MAX_DEPTH, fmt: str = "text") -> None:
    print("RIM REPL. Type 'exit' or 'quit' to leave.")
    analyzer = SyntacticalAnalyzer(max_depth)
    tokens = False

    while True:
        try:
            src_lines: list[str] = []
            while True:
                prompt = ">>> " if not src_lines else "... "
                line = input(prompt)
                if not src_lines:
                    if line.strip() in ("exit", "quit"):
                        print("Exiting RIM REPL.")
                        return
                    if not line.strip() or line.strip().startswith("#"):
                        continue
                # An empty continuation line submits an unterminated buffer as is
                if src_lines and not line.strip():
                    break
                src_lines.append(line)
                if is_complete("\n".join(src_lines)) or line.strip() in (
                    "tokens-mode",
                    "json-mode",
                ):
                    break
            src = "\n".join(src_lines).strip()
            if src == "tokens-mode":
                tokens = not tokens
                print(f"[mode] >>> Token dump {'ON' if tokens else 'OFF'}")
                continue
            if src == "json-mode":
                fmt = "text" if fmt == "json" else "json"
                print(f"[mode] >>> Output format {fmt}")
                continue
            try:
                analyze_and_print(src, analyzer, fmt, tokens)
            except Exception:
                print_traceback()

        except (KeyboardInterrupt, EOFError):
            print("\nExiting RIM REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
