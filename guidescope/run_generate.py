#!/usr/bin/env python3
"""Command-line entry point: build a guideline-search prompt and query list."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional

from guidescope.codec import (
    DEFAULT_SHARE_BASE_URL,
    ConfigParseError,
    encode_config_to_link,
    is_share_link_too_long,
    load_config_json,
)
from guidescope.config_ops import cap_vendor_doc_text
from guidescope.generation import create_config, generate_from_config
from guidescope.normalizer import normalize_config, validate_config
from guidescope.presets import PRESETS_BY_ID
from guidescope.types import AppConfig, GenerateOptions


EXIT_INVALID_CONFIG = 1
EXIT_UNREADABLE_INPUT = 2


def _write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)
        handle.write("\n")


def _write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text if text.endswith("\n") else f"{text}\n", encoding="utf-8")


def _load_stored_settings(path: Optional[Path]) -> Optional[Dict[str, Any]]:
    if path is None:
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def _build_config(args: argparse.Namespace) -> AppConfig:
    if args.config is not None:
        config = normalize_config(load_config_json(args.config.read_text(encoding="utf-8")))
        config = replace(config, vendor_doc_text=cap_vendor_doc_text(config.vendor_doc_text))
        if args.query:
            config = replace(config, query=args.query)
        return config

    return create_config(
        GenerateOptions(
            query=args.query or "",
            preset=args.preset_id,
            difficulty=args.difficulty,
            custom_keywords=args.custom_keyword or None,
            date=args.date,
        )
    )


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate a guideline-search prompt and search queries."
    )
    parser.add_argument("--query", default=None, help="Search theme / question.")
    parser.add_argument(
        "--preset-id",
        default="medical-device",
        choices=sorted(PRESETS_BY_ID),
        help="Purpose preset used to seed categories and keyword chips.",
    )
    parser.add_argument(
        "--difficulty",
        default="standard",
        choices=["standard", "professional"],
    )
    parser.add_argument("--date", default=None, help="Reference date (YYYY-MM-DD), defaults to today.")
    parser.add_argument(
        "--custom-keyword",
        action="append",
        default=None,
        help="Additional search keyword; repeat for several.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Exported config JSON to import instead of building one from flags.",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Stored extended-settings JSON (partial overrides allowed).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Directory for prompt.md, queries.txt and config.json.",
    )
    parser.add_argument(
        "--share-base-url",
        default=DEFAULT_SHARE_BASE_URL,
        help="Base URL used when printing a share link.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only report errors.",
    )
    return parser.parse_args()


def main() -> int:
    args = _parse_args()

    try:
        config = _build_config(args)
        stored_settings = _load_stored_settings(args.settings)
    except (OSError, ConfigParseError, json.JSONDecodeError) as exc:
        print(f"Could not read input: {exc}", file=sys.stderr)
        return EXIT_UNREADABLE_INPUT

    validation = validate_config(config)
    for warning in validation.warnings:
        if not args.quiet:
            print(f"warning: {warning}", file=sys.stderr)
    if not validation.is_valid:
        for error in validation.errors:
            print(f"error: {error}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    result = generate_from_config(config, stored_settings)

    _write_text(args.output_dir / "prompt.md", result.prompt)
    _write_text(args.output_dir / "queries.txt", "\n".join(result.search_queries))
    _write_json(args.output_dir / "config.json", result.config.to_dict())

    if not args.quiet:
        print(f"Prompt and {len(result.search_queries)} queries written to {args.output_dir}")
        if is_share_link_too_long(result.config, args.share_base_url):
            print("Share link too long; share config.json instead.")
        else:
            print(f"Share link: {encode_config_to_link(result.config, args.share_base_url)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
