from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, cast

from dotenv import load_dotenv

from propmerge.app import build_merger, reconcile_property
from propmerge.config import ConfigurationError, configure_logging, get_merge_config
from propmerge.domain.model import Provider, ResolutionMethod, SourceReference
from propmerge.serialization import dumps_merge_result

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from types import FrameType

    from propmerge.config import MergeConfig

log = logging.getLogger(__name__)

STDIN_MARKER = "-"

_PAYLOAD_KEYS: Mapping[Provider, tuple[str, ...]] = {
    Provider.ZILLOW: ("zillow",),
    Provider.REDFIN: ("redfin",),
    Provider.COUNTY_ASSESSOR: ("countyAssessor", "county_assessor", "county-assessor"),
}


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Merge provider property records into one canonical property",
    )
    parser.add_argument(
        "input",
        nargs="?",
        default=STDIN_MARKER,
        help="JSON file with address, zillow, redfin and countyAssessor keys ('-' for stdin)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the merge result to this file instead of stdout",
    )
    parser.add_argument(
        "--strategy",
        choices=[method.value for method in ResolutionMethod],
        help="Resolution strategy (defaults to config)",
    )
    parser.add_argument(
        "--priority-file",
        type=Path,
        help="TOML file layering source priorities over the built-in policy",
    )
    parser.add_argument(
        "--quality-threshold",
        type=int,
        help="Completeness above which the result is marked as scraped (defaults to config)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Log level name, e.g. DEBUG to see every conflict",
    )
    parser.add_argument(
        "--compact",
        action="store_true",
        help="Emit single-line JSON",
    )
    return parser.parse_args(list(argv))


def _parse_iso_datetime(value: str) -> datetime:
    try:
        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        dt = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid ISO timestamp: {value}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _read_document(source: str) -> dict[str, object]:
    if source == STDIN_MARKER:
        text = sys.stdin.read()
    else:
        path = Path(source)
        if not path.is_file():
            raise ValueError(f"Input file not found: {source}")
        text = path.read_text(encoding="utf-8")
    document = json.loads(text)
    if not isinstance(document, dict):
        raise ValueError("Input must be a JSON object")
    return cast(dict[str, object], document)


def _provider_entry(document: Mapping[str, object], provider: Provider) -> object:
    for key in _PAYLOAD_KEYS[provider]:
        if key in document:
            return document[key]
    return None


def _parse_reference(provider: Provider, raw: object) -> SourceReference:
    if not isinstance(raw, dict):
        raise ValueError(f"Reference for {provider} must be an object")
    entry = cast(dict[str, object], raw)
    fetched_at = entry.get("fetchedAt")
    confidence = entry.get("confidence")
    url = entry.get("url")
    if not isinstance(fetched_at, str):
        raise ValueError(f"Reference for {provider} needs an ISO fetchedAt timestamp")
    if isinstance(confidence, bool) or not isinstance(confidence, int | float):
        raise ValueError(f"Reference for {provider} needs a numeric confidence")
    return SourceReference(
        source=provider,
        fetched_at=_parse_iso_datetime(fetched_at),
        confidence=float(confidence),
        url=url if isinstance(url, str) else None,
    )


def _parse_references(document: Mapping[str, object]) -> dict[Provider, SourceReference]:
    raw = document.get("references")
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError("references must be an object keyed by provider")
    entries = cast(dict[str, object], raw)
    references: dict[Provider, SourceReference] = {}
    for provider in Provider:
        entry = _provider_entry(entries, provider)
        if entry is not None:
            references[provider] = _parse_reference(provider, entry)
    return references


def _resolve_config(args: argparse.Namespace) -> MergeConfig:
    config = get_merge_config()
    if args.strategy is not None:
        config = replace(config, resolution_strategy=ResolutionMethod(args.strategy))
    if args.priority_file is not None:
        config = replace(config, priority_file=args.priority_file)
    if args.quality_threshold is not None:
        if not 0 <= args.quality_threshold <= 100:
            raise ValueError("Quality threshold must be within 0-100")
        config = replace(config, quality_threshold=args.quality_threshold)
    return config


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        configure_logging(level=parsed_args.log_level)
        document = _read_document(parsed_args.input)
        address = document.get("address")
        if not isinstance(address, str) or not address.strip():
            raise ValueError("Input is missing a non-empty address")  # noqa: TRY301
        references = _parse_references(document)
        merger = build_merger(_resolve_config(parsed_args))
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        result = reconcile_property(
            address,
            zillow=_provider_entry(document, Provider.ZILLOW),
            redfin=_provider_entry(document, Provider.REDFIN),
            county_assessor=_provider_entry(document, Provider.COUNTY_ASSESSOR),
            references=references,
            merger=merger,
        )
        rendered = dumps_merge_result(result, indent=None if parsed_args.compact else 2)
        if parsed_args.output is not None:
            parsed_args.output.write_text(rendered + "\n", encoding="utf-8")
            log.info("Wrote merge result to %s", parsed_args.output)
        else:
            sys.stdout.write(rendered + "\n")
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console entry point: load `.env`, install the SIGINT handler, run."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
