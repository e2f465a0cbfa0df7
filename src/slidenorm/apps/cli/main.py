from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import orjson

from slidenorm.core.config import NormalizeOptions
from slidenorm.core.errors import NormalizeError
from slidenorm.core.normalize import normalize_presentation
from slidenorm.core.validate.schema_validate import SCHEMA_PATH, load_json, validate_document


def _print_errors(errors: list[str], limit: int = 30) -> None:
    for m in errors[:limit]:
        print(f"  {m}")
    if len(errors) > limit:
        print(f"  ... ({len(errors)} errors)")


def _load_document(in_path: Path) -> object | None:
    if not in_path.exists():
        print(f"[NG] input not found: {in_path}")
        return None
    try:
        return load_json(in_path)
    except orjson.JSONDecodeError as e:
        print(f"[NG] input is not valid JSON: {in_path}")
        print(f"      detail: {e}")
        return None


def _options_from_args(args: argparse.Namespace) -> NormalizeOptions:
    kwargs: dict = {}
    if args.font_face:
        kwargs["default_font_face"] = args.font_face
    if args.font_size is not None:
        kwargs["default_font_size"] = args.font_size
    if args.layout:
        kwargs["default_layout"] = args.layout
    if args.background_first:
        kwargs["background_paint_order"] = "before"
    if args.fail_on_duplicate_masters:
        kwargs["duplicate_master_names"] = "error"
    return NormalizeOptions(**kwargs)


def cmd_paths(_: argparse.Namespace) -> int:
    print(f"schema.presentation: {SCHEMA_PATH}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    in_path = Path(args.input).resolve()
    document = _load_document(in_path)
    if document is None:
        return 2

    errors = validate_document(document)
    if errors:
        print(f"[NG] {in_path.as_posix()} does NOT conform to the presentation schema")
        _print_errors(errors)
        return 2
    print(f"[OK] {in_path.as_posix()}")
    return 0


def cmd_normalize(args: argparse.Namespace) -> int:
    in_path = Path(args.input).resolve()
    document = _load_document(in_path)
    if document is None:
        return 2

    if args.strict:
        errors = validate_document(document)
        if errors:
            print("[NG] validation failed; normalize aborted", file=sys.stderr)
            for m in errors[:30]:
                print(f"  {m}", file=sys.stderr)
            return 2

    try:
        options = _options_from_args(args)
    except ValueError as e:
        print(f"[NG] invalid option: {e}", file=sys.stderr)
        return 2

    try:
        presentation = normalize_presentation(document, options)
    except NormalizeError as e:
        print(f"[NG] normalize failed: {e}", file=sys.stderr)
        return 2

    data = orjson.dumps(presentation, option=orjson.OPT_INDENT_2)
    if args.out:
        out_path = Path(args.out).resolve()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(data)
        print(f"[OK] normalized: {out_path}")
    else:
        sys.stdout.write(data.decode("utf-8") + "\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="slidenorm")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging to stderr")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_paths = sub.add_parser("paths", help="show bundled schema path")
    p_paths.set_defaults(func=cmd_paths)

    p_val = sub.add_parser("validate", help="validate a presentation json against the schema")
    p_val.add_argument("input", help="path to presentation .json")
    p_val.set_defaults(func=cmd_validate)

    p_norm = sub.add_parser("normalize", help="normalize a presentation json into resolved json")
    p_norm.add_argument("input", help="path to presentation .json")
    p_norm.add_argument("--out", required=False, help="output path (default: stdout)")
    p_norm.add_argument("--strict", action="store_true", help="schema-validate the input first")
    p_norm.add_argument("--font-face", help="default font face for text without one")
    p_norm.add_argument("--font-size", type=float, help="default font size for text without one")
    p_norm.add_argument("--layout", help="layout used when the document declares none")
    p_norm.add_argument(
        "--background-first",
        action="store_true",
        help="emit container backgrounds before their children (paint behind)",
    )
    p_norm.add_argument(
        "--fail-on-duplicate-masters",
        action="store_true",
        help="reject master slides sharing a name instead of keeping the last one",
    )
    p_norm.set_defaults(func=cmd_normalize)
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    raise SystemExit(args.func(args))


if __name__ == "__main__":
    main()
