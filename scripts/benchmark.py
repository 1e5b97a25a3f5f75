#!/usr/bin/env python3
"""Load test / benchmark script for the feed ranking API.

Usage:
    python scripts/benchmark.py --base-url http://localhost:8000 --concurrency 10 --requests 200
"""

import argparse
import asyncio
import random
import statistics
import time

import httpx

CATEGORIES = ["shoes", "bags", "dresses", "shirts", "jackets", "accessories"]
STORES = ["Loja Centro", "Loja Jardins", "Loja Pinheiros", "Loja Moema"]
ETAS = ["até 1h", "45 min", "2h", "1 dia"]


def make_catalog(size: int, rng: random.Random) -> list[dict]:
    return [
        {
            "id": i,
            "name": f"Product {i}",
            "store_name": rng.choice(STORES),
            "category": rng.choice(CATEGORIES),
            "gender": rng.choice(["male", "female", None]),
            "sizes": ",".join(rng.sample(["PP", "P", "M", "G", "GG"], 2)),
            "price_tag": round(rng.uniform(40, 1500), 2),
            "eta_text": rng.choice(ETAS),
            "view_count": rng.randint(0, 150),
        }
        for i in range(1, size + 1)
    ]


def build_requests(profiles: int, catalog: list[dict], rng: random.Random) -> list[tuple[str, dict]]:
    requests = []
    for p in range(profiles):
        profile_id = f"bench-{p}"
        requests.append(
            ("/api/v1/feed/rank", {"profile_id": profile_id, "seed": rng.randrange(10**9), "items": catalog})
        )
        requests.append(
            (
                "/api/v1/interactions",
                {"profile_id": profile_id, "interaction_type": "product_open", "item": rng.choice(catalog)},
            )
        )
        requests.append(
            (
                "/api/v1/interactions",
                {"profile_id": profile_id, "interaction_type": "filter_category", "value": rng.choice(CATEGORIES)},
            )
        )
    return requests


async def make_request(
    client: httpx.AsyncClient, url: str, payload: dict
) -> tuple[str, float, int]:
    start = time.perf_counter()
    try:
        resp = await client.post(url, json=payload)
        duration = time.perf_counter() - start
        return url, duration, resp.status_code
    except httpx.HTTPError:
        duration = time.perf_counter() - start
        return url, duration, 0


async def run_benchmark(base_url: str, concurrency: int, total_requests: int, catalog_size: int) -> None:
    rng = random.Random(0)
    catalog = make_catalog(catalog_size, rng)
    endpoints = build_requests(max(1, total_requests // 3), catalog, rng)

    paths = sorted({path for path, _ in endpoints})
    results: dict[str, list[float]] = {path: [] for path in paths}
    errors: dict[str, int] = {path: 0 for path in paths}

    sem = asyncio.Semaphore(concurrency)

    async def bounded_request(client: httpx.AsyncClient, path: str, payload: dict) -> None:
        async with sem:
            url = f"{base_url}{path}"
            _, duration, status = await make_request(client, url, payload)
            if 200 <= status < 300:
                results[path].append(duration)
            else:
                errors[path] += 1

    async with httpx.AsyncClient(timeout=30.0) as client:
        tasks = []
        for i in range(total_requests):
            path, payload = endpoints[i % len(endpoints)]
            tasks.append(bounded_request(client, path, payload))

        overall_start = time.perf_counter()
        await asyncio.gather(*tasks)
        overall_duration = time.perf_counter() - overall_start

    # Print report
    print(f"\n{'=' * 70}")
    print("FEED RANKING - BENCHMARK REPORT")
    print(f"{'=' * 70}")
    print(f"Total requests: {total_requests} | Concurrency: {concurrency} | Catalog: {catalog_size}")
    print(f"Total time: {overall_duration:.2f}s | RPS: {total_requests / overall_duration:.1f}")
    print(f"{'=' * 70}\n")

    for path, latencies in results.items():
        if not latencies:
            print(f"{path}: No successful requests (errors: {errors[path]})")
            continue
        sorted_lat = sorted(latencies)
        p95_idx = min(int(len(sorted_lat) * 0.95), len(sorted_lat) - 1)
        print(f"{path}")
        print(f"  Requests : {len(latencies)} OK, {errors[path]} errors")
        print(f"  Avg      : {statistics.mean(latencies) * 1000:.1f}ms")
        print(f"  P50      : {statistics.median(latencies) * 1000:.1f}ms")
        print(f"  P95      : {sorted_lat[p95_idx] * 1000:.1f}ms")
        print(f"  Min/Max  : {min(latencies) * 1000:.1f}ms / {max(latencies) * 1000:.1f}ms")
        print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Benchmark the feed ranking API")
    parser.add_argument("--base-url", default="http://localhost:8000")
    parser.add_argument("--concurrency", type=int, default=10)
    parser.add_argument("--requests", type=int, default=200)
    parser.add_argument("--catalog-size", type=int, default=60)
    args = parser.parse_args()

    asyncio.run(run_benchmark(args.base_url, args.concurrency, args.requests, args.catalog_size))


if __name__ == "__main__":
    main()
