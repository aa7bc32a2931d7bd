from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ..core.summary import summarize
from ..io import dump_result_file, load_scoring_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="legalrisk-score",
        description="Score questionnaire answers and risk events offline (inherent, residual, priority, 5x5 matrix).",
    )
    parser.add_argument("input", help="JSON file with 'answers' and/or 'risks'")
    parser.add_argument(
        "--out",
        default="data/output/score.json",
        help="Output JSON file path (default: data/output/score.json)",
    )
    parser.add_argument("--top", type=int, default=0, help="Only keep the N highest risks in the output")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    input_path = Path(args.input).resolve()
    output_path = Path(args.out).resolve()

    if not input_path.exists() or not input_path.is_file():
        print(f"error: input file not found: {input_path}", file=sys.stderr)
        return 2

    try:
        answers, risks = load_scoring_file(input_path)
    except ValueError as exc:
        print(f"error: invalid input: {exc}", file=sys.stderr)
        return 2

    payload = summarize(answers, risks)
    if args.top > 0:
        payload["risks"] = payload["risks"][: args.top]

    output_path.parent.mkdir(parents=True, exist_ok=True)
    dump_result_file(output_path, payload)

    if "wizard" in payload:
        print(f"wizard_score={payload['wizard']['risk_score']}")
    print(f"risks={len(risks)}")
    print(f"wrote={output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
