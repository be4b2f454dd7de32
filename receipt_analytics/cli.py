#!/usr/bin/env python3
"""
Receipt Analytics CLI — summaries of the inbox from the command line.

USAGE:
  python -m receipt_analytics.cli summary                                 # All time, daily series
  python -m receipt_analytics.cli summary --month 2024-03                 # One month
  python -m receipt_analytics.cli summary --month 2024-03 --compare-month 2024-02
  python -m receipt_analytics.cli summary --start 2024-03-01 --end 2024-03-14 --compare-previous
  python -m receipt_analytics.cli summary --granularity weekly --json

  python -m receipt_analytics.cli offers                                  # Trim first 7 / last 3 days
  python -m receipt_analytics.cli offers --keep-first --keep-last         # No trimming
  python -m receipt_analytics.cli brands                                  # Detected brands
  python -m receipt_analytics.cli survey --question 03
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from receipt_analytics.analytics.brands import products_by_brand
from receipt_analytics.analytics.dashboard import offers_dashboard, sales_dashboard, survey_summary
from receipt_analytics.config import INBOX_FOLDER, TIME_GRANULARITIES
from receipt_analytics.data.schemas import DateWindow, FilterSpec, InvalidFilterSpec
from receipt_analytics.data.store import DataStore


def _window(month: str | None, start: str | None, end: str | None) -> DateWindow:
    if month:
        return DateWindow.for_month(month)
    if start or end:
        return DateWindow.between(start, end)
    return DateWindow.all_time()


def _build_filter(args) -> FilterSpec:
    """Build the primary FilterSpec from CLI args."""
    return FilterSpec(
        products=args.product or "all",
        retailers=getattr(args, "retailer", None) or "all",
        date_window=_window(args.month, args.start, args.end),
    )


def _build_comparison(args, primary: FilterSpec) -> FilterSpec | None:
    if args.compare_month:
        return primary.with_window(DateWindow.for_month(args.compare_month))
    if args.compare_previous:
        return primary.previous_window()
    return None


def _load(args) -> DataStore:
    return DataStore().load(Path(args.inbox))


def _dump(data: dict) -> None:
    print(json.dumps(data, indent=2, default=str))


def _header(title: str) -> None:
    print("\n" + "=" * 70)
    print(f"  RECEIPT ANALYTICS — {title}")
    print("=" * 70)


def cmd_summary(args):
    """Sales overview for a period, optionally against a comparison period."""
    primary = _build_filter(args)
    comparison = _build_comparison(args, primary)
    store = _load(args)
    data = sales_dashboard(store, primary, comparison, granularity=args.granularity)

    if args.json:
        _dump(data)
        return

    _header("SALES SUMMARY")
    print(f"  Period: {data['period_label']}")
    m = data["metrics"]
    if data.get("empty"):
        print("\n  No redemptions match this filter.\n")
    else:
        print(f"  Dates:  {data['date_range']}")
        print(f"\n  Redemptions: {m['total_count']:,}  |  Days: {m['days_in_range']}  |  "
              f"Per day: {m['avg_per_day']:.1f}  |  Value: ${m['total_value']:,.2f}")

        print("\n  TOP RETAILERS")
        for r in data["retailers"][:5]:
            print(f"    {r['name'][:36]:<38}{r['count']:>8,}{r['percentage']:>8.1f}%")

        print("\n  TOP PRODUCTS")
        for p in data["products"][:10]:
            print(f"    {p['display_name'][:36]:<38}{p['count']:>8,}{p['percentage']:>8.1f}%")

        print(f"\n  {args.granularity.upper()} SERIES")
        for point in data["time_series"][-14:]:
            trend = f"{point['trend']:.1f}" if point["trend"] is not None else "-"
            print(f"    {str(point['label']):<20}{point['count']:>8,}   trend {trend}")

        if data["insights"]:
            print("\n  INSIGHTS")
            for insight in data["insights"]:
                print(f"    • {insight['text']}")

    comp = data.get("comparison")
    if comp:
        g = comp["growth"]
        print(f"\n  VS {comp['period_label']}: {comp['metrics']['total_count']:,} redemptions")
        print(f"    Units {g['unit_growth']:+,} ({g['unit_growth_pct']:+.1f}%)  |  "
              f"Value {g['value_growth']:+,.2f} ({g['value_growth_pct']:+.1f}%)  |  "
              f"Daily volume {g['daily_volume_growth_pct']:+.1f}%")
    print()


def cmd_offers(args):
    """Offer hit metrics with per-offer ramp-up / ramp-down trimming."""
    spec = FilterSpec(
        products=args.offer or "all",
        date_window=_window(args.month, args.start, args.end),
    )
    store = _load(args)
    data = offers_dashboard(store, spec, exclude_first=not args.keep_first, exclude_last=not args.keep_last)

    if args.json:
        _dump(data)
        return

    _header("OFFER INSIGHTS")
    print(f"  Period: {data['period_label']}")
    m = data["metrics"]
    print(f"\n  Hits: {m['total_hits']:,}  |  Days: {m['period_days']}  |  Per day: {m['avg_hits_per_day']:.1f}")

    if data["excluded_dates"]:
        print("\n  EXCLUDED DATES")
        for offer, dates in data["excluded_dates"].items():
            print(f"    {offer[:36]:<38}{len(dates)} day(s): {dates[0]} … {dates[-1]}")

    if data.get("empty"):
        print("\n  No offer hits remain after filtering.\n")
        return

    print("\n  OFFERS")
    for o in data["offers"]:
        print(f"    {o['name'][:36]:<38}{o['count']:>8,}{o['percentage']:>8.1f}%{o['avg_hits_per_day']:>8.1f}/day")

    for title, key in (("GENDER", "gender"), ("AGE GROUP", "age_groups")):
        if data[key]:
            print(f"\n  {title}")
            for row in data[key]:
                print(f"    {row['name']:<38}{row['count']:>8,}{row['percentage']:>8.1f}%")
    print()


def cmd_brands(args):
    """List detected brands and the products under each."""
    store = _load(args)
    if args.json:
        _dump({b: [i.to_dict() for i in infos] for b, infos in products_by_brand(store.brand_mapping).items()})
        return

    _header("BRANDS")
    grouped = products_by_brand(store.brand_mapping)
    print(f"\n  {len(store.brand_list)} brand(s), {len(store.brand_mapping)} product(s)\n")
    for brand, infos in grouped.items():
        print(f"  {brand}")
        for info in infos:
            print(f"      {info.display_name}")
    print()


def cmd_survey(args):
    """Survey answer shares by age group."""
    spec = _build_filter(args)
    store = _load(args)
    data = survey_summary(store, spec, question=args.question)

    if args.json:
        _dump(data)
        return

    _header("SURVEY RESPONSES")
    if data.get("empty"):
        print("\n  No answered survey questions found.\n")
        return
    print(f"  Q{data['question']}: {data['question_text']}\n")
    for r in data["responses"]:
        print(f"    {r['response'][:36]:<38}{r['count']:>8,}{r['percentage']:>8.1f}%")
    print()


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--month", help="Calendar month (YYYY-MM)")
    p.add_argument("--start", help="Custom range start (YYYY-MM-DD)")
    p.add_argument("--end", help="Custom range end (YYYY-MM-DD)")
    p.add_argument("--inbox", default=str(INBOX_FOLDER), help=f"CSV folder (default {INBOX_FOLDER})")
    p.add_argument("--json", action="store_true", help="Print JSON instead of a text summary")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Receipt Analytics — redemption aggregation engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # summary subcommand
    summary_parser = subparsers.add_parser("summary", help="Sales overview")
    _add_filter_args(summary_parser)
    summary_parser.add_argument("--product", nargs="*", help="Restrict to product name(s)")
    summary_parser.add_argument("--retailer", nargs="*", help="Restrict to retailer(s)")
    summary_parser.add_argument("--compare-month", help="Comparison month (YYYY-MM)")
    summary_parser.add_argument("--compare-previous", action="store_true",
                                help="Compare against the preceding window of equal length")
    summary_parser.add_argument("--granularity", choices=TIME_GRANULARITIES, default="daily")
    summary_parser.set_defaults(func=cmd_summary)

    # offers subcommand
    offers_parser = subparsers.add_parser("offers", help="Offer hit insights")
    _add_filter_args(offers_parser)
    offers_parser.add_argument("--offer", nargs="*", help="Restrict to offer name(s)")
    offers_parser.add_argument("--keep-first", action="store_true", help="Keep each offer's first 7 days")
    offers_parser.add_argument("--keep-last", action="store_true", help="Keep each offer's last 3 days")
    offers_parser.set_defaults(func=cmd_offers)

    # brands subcommand
    brands_parser = subparsers.add_parser("brands", help="Detected brand prefixes")
    brands_parser.add_argument("--inbox", default=str(INBOX_FOLDER))
    brands_parser.add_argument("--json", action="store_true")
    brands_parser.set_defaults(func=cmd_brands)

    # survey subcommand
    survey_parser = subparsers.add_parser("survey", help="Survey responses by age group")
    _add_filter_args(survey_parser)
    survey_parser.add_argument("--question", help="Question number (e.g. 03); defaults to the repurchase question")
    survey_parser.add_argument("--product", nargs="*", help="Restrict to product name(s)")
    survey_parser.add_argument("--retailer", nargs="*", help="Restrict to retailer(s)")
    survey_parser.set_defaults(func=cmd_survey)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    try:
        args.func(args)
    except InvalidFilterSpec as exc:
        print(f"  Invalid filter: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
