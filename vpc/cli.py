import argparse
import os
import sys
import tempfile

from . import compiler, validator
from .errors import CodegenError, LexError, ParseError


def write_atomic(path, text):
    """Write text to path via a temporary file in the same directory."""
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(prefix=".vpc-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        # mkstemp creates 0600; give the result the usual umask-based mode
        umask = os.umask(0)
        os.umask(umask)
        os.chmod(tmp_path, 0o666 & ~umask)
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise


def main(argv=None):
    ap = argparse.ArgumentParser(prog="vpc", description="Viper compiler - x86-64 NASM backend")
    ap.add_argument("input", help="Input .vp file")
    ap.add_argument("-o", "--output", help="Output assembly file", default="output.asm")
    ap.add_argument("--entry", help="Entry point symbol", default="_start")
    ap.add_argument("--no-div-guard", action="store_true", help="Do not check divisors for zero at run time")
    ap.add_argument("--no-validate", action="store_true", help="Skip validation checks")
    args = ap.parse_args(argv)

    try:
        with open(args.input, "r", encoding="utf-8") as f:
            src = f.read()
    except FileNotFoundError:
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Failed to read input file: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        result = compiler.compile_source(
            src,
            entry_symbol=args.entry,
            div_zero_guard=not args.no_div_guard,
            validate=not args.no_validate,
        )
    except LexError as e:
        print(f"Lex error in {args.input}:", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        sys.exit(1)
    except ParseError as e:
        print(f"Syntax error in {args.input}:", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        sys.exit(1)
    except validator.ValidationError as e:
        print(f"Validation error in {args.input}:", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        sys.exit(1)
    except CodegenError as e:
        print("Internal compiler error:", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        sys.exit(1)

    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)

    try:
        write_atomic(args.output, result.asm)
    except OSError as e:
        print(f"Error: Failed to write output file: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"Wrote assembly to {args.output}")


if __name__ == "__main__":
    main()
