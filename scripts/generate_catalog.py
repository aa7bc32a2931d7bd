from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from app.config import get_settings
from app.services.catalog_generator import (
    DEFAULT_DELAY_SECONDS,
    SEED_FILES,
    CatalogGenerator,
    scenario_breakdown,
    write_seed_file,
)
from app.services.deepseek_client import DeepSeekClient

logger = logging.getLogger("generate_catalog")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate catalog seed files with DeepSeek.")
    parser.add_argument("kind", choices=[*SEED_FILES, "all"], help="Which seed file to generate.")
    parser.add_argument("--out-dir", default="", help="Seed directory (default: SEEDS_DIR).")
    parser.add_argument(
        "--delay",
        type=float,
        default=DEFAULT_DELAY_SECONDS,
        help=f"Seconds to wait between API calls (default: {DEFAULT_DELAY_SECONDS}).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    client = DeepSeekClient()
    if not client.is_configured:
        print("error: DEEPSEEK_API_KEY is not set.", file=sys.stderr)
        return 2

    seeds_dir = Path(args.out_dir).expanduser() if args.out_dir else get_settings().seeds_dir
    generator = CatalogGenerator(client, delay_seconds=args.delay)
    kinds = list(SEED_FILES) if args.kind == "all" else [args.kind]

    for kind in kinds:
        if kind == "protocols":
            data = generator.generate_protocols()
            count = len(data)
        elif kind == "scenarios":
            data = generator.generate_scenarios()
            count = len(data)
            breakdown = scenario_breakdown(data)
            logger.info("Scenarios by category: %s", breakdown["byCategory"])
            logger.info("Scenarios by level: %s", breakdown["byLevel"])
        else:
            data = generator.generate_wizard_data()
            count = len(data["activities"]) + len(data["riskAreas"])
        path = write_seed_file(seeds_dir, SEED_FILES[kind], data)
        print(f"{kind}: {count} items -> {path}")

    print("Run scripts/seed_catalog.py to load the seed files into the database.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
