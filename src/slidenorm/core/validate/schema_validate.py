from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

import orjson
from jsonschema import Draft202012Validator

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "schemas" / "presentation.schema.json"


def load_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


def _json_path(error: Any) -> str:
    path = "$"
    for p in error.absolute_path:
        path += f"[{p!r}]" if isinstance(p, str) else f"[{p}]"
    return path


def validate_document(document: Any, schema_path: Path = SCHEMA_PATH) -> list[str]:
    """
    Validate an in-memory presentation document against the JSON schema.
    Returns a list of human-readable error strings (empty if valid).
    Each error is formatted as: "- <jsonpath>: <message>"
    """
    schema = load_json(schema_path)
    v = Draft202012Validator(schema)
    errors = sorted(v.iter_errors(document), key=lambda e: [str(p) for p in e.absolute_path])
    return [f"- {_json_path(e)}: {e.message}" for e in errors]


def validate_document_file(instance_path: Path, schema_path: Path = SCHEMA_PATH) -> list[str]:
    if not schema_path.exists():
        return [f"[ERR] schema not found: {schema_path}"]
    if not instance_path.exists():
        return [f"[ERR] instance not found: {instance_path}"]
    try:
        document = load_json(instance_path)
    except orjson.JSONDecodeError as e:
        return [f"[ERR] invalid JSON in {instance_path}: {e}"]
    return validate_document(document, schema_path)


def main() -> int:
    ap = argparse.ArgumentParser(prog="schema_validate")
    ap.add_argument("--instance", required=True, help="path to presentation json to validate")
    ap.add_argument("--schema", default=str(SCHEMA_PATH), help="path to *.schema.json")
    args = ap.parse_args()

    instance_path = Path(args.instance)
    errors = validate_document_file(instance_path, Path(args.schema))
    if not errors:
        print(f"[OK] {instance_path} conforms to {args.schema}")
        return 0
    if errors[0].startswith("[ERR]"):
        print(errors[0])
        return 2
    print(f"[NG] {instance_path} does NOT conform to {args.schema}")
    for err in errors:
        print(err)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
