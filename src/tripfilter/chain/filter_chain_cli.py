"""Run the itinerary filter chain over a JSON file of candidate itineraries."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Sequence

from rich.console import Console
from rich.table import Table

from tripfilter.chain.filter_chain_builder import ItineraryFilterChainBuilder
from tripfilter.chain.filter_chain_config import FilterChainConfig
from tripfilter.model.domain_types import Itinerary
from tripfilter.model.itinerary_io import (
    itineraries_to_frame,
    load_itineraries_json,
    parse_timestamp,
    write_itineraries_json,
)

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--itineraries",
        required=True,
        help="JSON file with the candidate itineraries produced by the search.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML file with filter chain options. Command line flags override it.",
    )
    parser.add_argument("--arrive-by", action="store_true", default=None, help="Arrive-by search.")
    parser.add_argument("--min-limit", type=int, default=None, help="Approximate minimum number of results.")
    parser.add_argument("--max-limit", type=int, default=None, help="Maximum number of results.")
    parser.add_argument("--group-by-p", type=float, default=None, help="Group-by distance fraction (0-1).")
    parser.add_argument(
        "--latest-departure",
        default=None,
        help="ISO-8601 instant; itineraries departing after it are removed.",
    )
    parser.add_argument(
        "--short-transit-slack",
        type=int,
        default=None,
        help="Seconds; enables the time-table variation filter when positive.",
    )
    parser.add_argument(
        "--keep-dominated-transit",
        action="store_true",
        help="Disable the transit-vs-street cost filter.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Tag removed itineraries instead of deleting them.",
    )
    parser.add_argument("--output-json", default=None, help="Write the resulting itineraries as JSON.")
    parser.add_argument("--output-csv", default=None, help="Write a one-row-per-itinerary summary CSV.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> FilterChainConfig:
    config = FilterChainConfig.from_yaml(args.config) if args.config else FilterChainConfig()
    latest_departure = (
        parse_timestamp(args.latest_departure, "--latest-departure")
        if args.latest_departure
        else None
    )
    config = config.with_overrides(
        arrive_by=args.arrive_by,
        approximate_min_limit=args.min_limit,
        max_limit=args.max_limit,
        group_by_p=args.group_by_p,
        latest_departure_time=latest_departure,
        short_transit_slack_seconds=args.short_transit_slack,
        debug=args.debug,
    )
    if args.keep_dominated_transit:
        config = config.with_overrides(remove_transit_with_higher_cost_than_best_on_street_only=False)
    return config


def main(argv: Sequence[str] | None = None) -> List[Itinerary]:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    try:
        config = resolve_config(args)
        itineraries = load_itineraries_json(args.itineraries)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    cut: List[Itinerary] = []
    config = config.with_overrides(max_limit_reached_subscriber=cut.append)
    chain = ItineraryFilterChainBuilder.from_config(config).build()
    logger.info("Running filter chain: %s", " -> ".join(chain.filter_names))
    try:
        result = chain.apply(itineraries)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc
    logger.info("Filter chain kept %d of %d itineraries", len(result), len(itineraries))
    if cut:
        logger.info("Max limit reached; first itinerary cut: %s", cut[0].label())

    if args.output_json:
        write_itineraries_json(args.output_json, result)
        logger.info("Wrote %d itineraries to %s", len(result), args.output_json)
    if args.output_csv:
        output_path = Path(args.output_csv)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        itineraries_to_frame(result).to_csv(output_path, index=False)
        logger.info("Wrote summary CSV to %s", output_path)

    print_result_table(result, chain.filter_names)
    return result


def print_result_table(itineraries: Sequence[Itinerary], filter_names: Sequence[str]) -> None:
    console = Console()
    table = Table(
        title=f"Filtered itineraries ({' -> '.join(filter_names) or 'no filters'})",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("#", justify="right")
    table.add_column("Itinerary", style="bold")
    table.add_column("Depart")
    table.add_column("Arrive")
    table.add_column("Cost", justify="right", style="green")
    table.add_column("Transfers", justify="right")
    table.add_column("Deleted by", style="yellow")

    for index, it in enumerate(itineraries, start=1):
        table.add_row(
            str(index),
            it.label(),
            it.start_time.strftime("%H:%M"),
            it.end_time.strftime("%H:%M"),
            f"{it.generalized_cost:,}",
            str(it.number_of_transfers),
            ", ".join(notice.tag for notice in it.system_notices),
            style="dim" if it.is_marked_as_deleted else None,
        )
    console.print(table)


if __name__ == "__main__":
    main()
