#!/usr/bin/env python3
"""Lint the transform handler's JSONata expressions before packaging.

Checks that request.jsonata and response.jsonata compile and, when sample
files are given, that each evaluates against its sample to a non-empty JSON
object. With expected files, the result must also equal the expected JSON:
the request side is compared to ``request_data.inputs`` of an Execute API
request document, the response side to the whole document. Prints the
cleaned one-line form of each expression.

Usage:
    python3 tools/lint_transforms.py
    python3 tools/lint_transforms.py --request-sample assets/unstructured-request.json \
        --response-sample assets/spark-response.json \
        --request-expected assets/spark-request.json \
        --response-expected assets/unstructured-response.json
"""

from __future__ import annotations

import argparse
import json
import pathlib
from typing import Any, Callable, List, Optional

from transform_shared.expressions import clean_expression, is_valid_expression, load_expression, run

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
DEFAULT_TRANSFORMS_DIR = REPO_ROOT / "backend" / "lambda" / "transform_handler" / "transforms"


def _read_json(path: pathlib.Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _request_inputs(document: Any) -> Any:
    if isinstance(document, dict) and isinstance(document.get("request_data"), dict):
        return document["request_data"].get("inputs")
    return document


def _lint(
    name: str,
    path: pathlib.Path,
    sample: Optional[pathlib.Path],
    expected: Optional[pathlib.Path] = None,
    select: Callable[[Any], Any] = lambda document: document,
) -> List[str]:
    problems: List[str] = []
    try:
        expr = load_expression(path)
    except OSError as exc:
        return [f"{name}: {exc}"]

    cleaned = clean_expression(expr)
    if not is_valid_expression(cleaned):
        return [f"{name}: {path} does not compile"]

    if sample is not None:
        data = _read_json(sample)
        result, failed = run(cleaned, data)
        if failed is not None:
            problems.append(f"{name}: evaluation failed: {failed.body['error']['message']}")
        elif not isinstance(result, dict) or not result:
            problems.append(f"{name}: expecting a non-empty JSON object from {sample.name}")
        elif expected is not None:
            want = select(_read_json(expected))
            if result != want:
                problems.append(
                    f"{name}: result does not match {expected.name}: "
                    f"got {json.dumps(result, sort_keys=True)}, expected {json.dumps(want, sort_keys=True)}"
                )

    if not problems:
        print(f"[OK] {name}: {cleaned}")
    return problems


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--transforms", type=pathlib.Path, default=DEFAULT_TRANSFORMS_DIR)
    parser.add_argument("--request-sample", type=pathlib.Path, default=None)
    parser.add_argument("--response-sample", type=pathlib.Path, default=None)
    parser.add_argument("--request-expected", type=pathlib.Path, default=None,
                        help="Execute API request document; its request_data.inputs is the expected result")
    parser.add_argument("--response-expected", type=pathlib.Path, default=None)
    args = parser.parse_args(argv)

    if args.request_expected and not args.request_sample:
        parser.error("--request-expected requires --request-sample")
    if args.response_expected and not args.response_sample:
        parser.error("--response-expected requires --response-sample")

    problems = _lint(
        "request", args.transforms / "request.jsonata", args.request_sample, args.request_expected, _request_inputs
    )
    problems += _lint("response", args.transforms / "response.jsonata", args.response_sample, args.response_expected)

    if problems:
        print("[ERROR] transform lint failed:")
        for p in problems:
            print(f"  - {p}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
