#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import re
from pathlib import Path

from podsync.dataset import SolidDataset
from podsync.diagnostics import dataset_as_markdown
from podsync.fetcher import client_fetch, create_client
from podsync.local_nodes import resource_url_of
from podsync.resource_info import AccessModes, ResourceInfo
from podsync.sync import get_contained_resource_urls, get_dataset
from podsync.turtle import triples_to_turtle


def safe_filename(url: str) -> str:
    value = re.sub(r"^[a-z]+://", "", resource_url_of(url))
    value = re.sub(r"[^A-Za-z0-9._-]+", "_", value)
    value = value.strip("._")
    return value or "resource"


def describe_modes(modes: AccessModes) -> str:
    granted = [name for name in ("read", "append", "write", "control") if getattr(modes, name)]
    return " ".join(granted) or "-"


def describe_info(info: ResourceInfo) -> list[str]:
    lines = [f"Location: {info.source_url}", f"Content-Type: {info.content_type or '-'}"]
    for relation, urls in info.linked_resources.items():
        for url in urls:
            lines.append(f"Link ({relation}): {url}")
    if info.permissions is not None:
        lines.append(f"Access (user): {describe_modes(info.permissions.user)}")
        lines.append(f"Access (public): {describe_modes(info.permissions.public)}")
    return lines


async def inspect(url: str) -> SolidDataset:
    async with create_client() as client:
        return await get_dataset(url, fetch=client_fetch(client))


def main() -> int:
    parser = argparse.ArgumentParser(description="Fetch a Turtle resource and print what it contains.")
    parser.add_argument("url", help="Resource or container URL")
    parser.add_argument("--output-dir", default="", help="Also write the fetched triples as Turtle into this directory")
    args = parser.parse_args()

    dataset = asyncio.run(inspect(args.url))
    for line in describe_info(dataset.resource_info):
        print(line)
    contained = get_contained_resource_urls(dataset)
    if contained:
        print(f"Contains {len(contained)} resource(s):")
        for url in contained:
            print(f"  {url}")
    print()
    print(dataset_as_markdown(dataset))

    if args.output_dir:
        out_dir = Path(args.output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        target = out_dir / f"{safe_filename(dataset.source_url)}.ttl"
        target.write_text(triples_to_turtle(dataset), encoding="utf-8")
        print(f"Wrote {len(dataset)} triple(s) to {target}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
