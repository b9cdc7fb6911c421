"""
Generate the full insight matrix against a running backend.

Picks a product, an objective and one or more segments from the catalog,
runs bulk generation through the InsightStore and prints every insight,
followed by the usage summary.

Usage:
    cd backend
    python3 -m scripts.generate_matrix --product coffee --objective increase-sales \
        --segment gen-z-creators --segment retired-diyers
    python3 -m scripts.generate_matrix --list
"""

import argparse
import asyncio
import sys

import httpx

from swot_explorer import catalog
from swot_explorer.orchestrator import Orchestrator
from swot_explorer.store import InsightStore


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate SWOT insights for a product/objective/segment selection.")
    parser.add_argument("--base-url", default="http://localhost:8000", help="Backend base URL")
    parser.add_argument("--product", help="Product id (see --list)")
    parser.add_argument("--objective", help="Business objective id (see --list)")
    parser.add_argument("--segment", action="append", default=[], help="Segment id, repeatable")
    parser.add_argument("--prompt-type", action="append", default=[], help="Limit to these prompt type ids")
    parser.add_argument("--delay", type=float, default=0.1, help="Seconds between requests")
    parser.add_argument("--list", action="store_true", help="Print the catalog ids and exit")
    return parser.parse_args(argv)


def print_catalog() -> None:
    sections = (
        ("Products", catalog.PRODUCTS),
        ("Objectives", catalog.BUSINESS_OBJECTIVES),
        ("Segments", catalog.SEGMENTS),
        ("Prompt types", catalog.PROMPT_TYPES),
    )
    for title, items in sections:
        print(f"{title}:")
        for item in items:
            print(f"  {item.id:<28} {item.name}")
        print()


def resolve(args: argparse.Namespace):
    product = catalog.get_product(args.product or "")
    objective = catalog.get_objective(args.objective or "")
    # Repeated ids collapse to one; toggling a segment twice would deselect it
    segment_ids = list(dict.fromkeys(args.segment))
    prompt_type_ids = list(dict.fromkeys(args.prompt_type))
    segments = [catalog.get_segment(s) for s in segment_ids]
    prompt_types = [catalog.get_prompt_type(p) for p in prompt_type_ids] or list(catalog.PROMPT_TYPES)

    problems = []
    if product is None:
        problems.append(f"unknown product: {args.product}")
    if objective is None:
        problems.append(f"unknown objective: {args.objective}")
    if not segments:
        problems.append("at least one --segment is required")
    problems += [f"unknown segment: {sid}" for sid, seg in zip(segment_ids, segments) if seg is None]
    problems += [f"unknown prompt type: {pid}" for pid, pt in zip(prompt_type_ids, prompt_types) if pt is None]
    return product, objective, segments, prompt_types, problems


async def run(args: argparse.Namespace) -> int:
    product, objective, segments, prompt_types, problems = resolve(args)
    if problems:
        for problem in problems:
            print(f"error: {problem}", file=sys.stderr)
        return 2

    async with httpx.AsyncClient(base_url=args.base_url, timeout=60.0) as client:
        store = InsightStore(client)
        orchestrator = Orchestrator(store, prompt_types=prompt_types, delay_seconds=args.delay)
        orchestrator.selection.product = product
        orchestrator.selection.objective = objective
        for segment in segments:
            orchestrator.selection.toggle_segment(segment)

        progress = await orchestrator.generate_all()

    for segment in segments:
        print("=" * 80)
        print(f"{segment.name} — {product.name} / {objective.name}")
        print("=" * 80)
        for prompt_type in prompt_types:
            insight = store.lookup(segment.id, prompt_type.id)
            print(f"\n## {prompt_type.name}")
            print(insight.content if insight else "(not generated)")
        print()

    print(f"Completed {progress.completed}/{progress.total} insights")
    print(f"Requests: {store.total_requests}  Estimated cost: ${store.estimated_cost:.4f}")
    if store.error:
        print(f"Last error: {store.error}", file=sys.stderr)
    return 0 if progress.total and progress.completed == progress.total else 1


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.list:
        print_catalog()
        return 0
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
