"""HTTP benchmark for Conduit API endpoints.

Run ``scripts/seed.py`` against the same server first; the detail and
comment endpoints use the first article returned by the listing.
"""
import argparse
import asyncio
import statistics
import time

import httpx

DEFAULT_BASE_URL = "http://localhost:8000"

ENDPOINTS = [
    ("GET /api/articles", "/api/articles"),
    ("GET /api/articles?limit=50", "/api/articles?limit=50"),
    ("GET /api/articles?tag=python", "/api/articles?tag=python"),
    ("GET /api/articles?author=user_0001", "/api/articles?author=user_0001"),
    ("GET /api/articles/{slug}", "/api/articles/{slug}"),
    ("GET /api/articles/{slug}/comments", "/api/articles/{slug}/comments"),
    ("GET /api/profiles/user_0001", "/api/profiles/user_0001"),
    ("GET /api/tags", "/api/tags"),
    ("GET /api/metrics", "/api/metrics"),
    ("GET /health", "/health"),
]


async def benchmark_endpoint(client: httpx.AsyncClient, name: str, path: str, iterations: int = 50):
    times = []
    op_counts = []
    errors = 0

    # Warmup
    for _ in range(3):
        try:
            await client.get(path)
        except httpx.HTTPError:
            pass

    for _ in range(iterations):
        try:
            start = time.perf_counter()
            resp = await client.get(path)
            elapsed = (time.perf_counter() - start) * 1000

            if resp.status_code == 200:
                times.append(elapsed)
                ops = resp.headers.get("X-Store-Op-Count", "?")
                if ops != "?":
                    op_counts.append(int(ops))
            else:
                errors += 1
        except httpx.HTTPError:
            errors += 1

    if not times:
        return {"name": name, "error": f"All {iterations} requests failed"}

    return {
        "name": name,
        "avg_ms": round(statistics.mean(times), 2),
        "p50_ms": round(sorted(times)[len(times) // 2], 2),
        "p95_ms": round(sorted(times)[int(len(times) * 0.95)], 2),
        "p99_ms": round(sorted(times)[int(len(times) * 0.99)], 2),
        "min_ms": round(min(times), 2),
        "max_ms": round(max(times), 2),
        "ops": round(statistics.mean(op_counts), 1) if op_counts else "N/A",
        "errors": errors,
        "iterations": len(times),
    }


async def run_benchmark(base_url: str, iterations: int = 50):
    print("=" * 80)
    print(f"Conduit API Benchmark — {iterations} iterations per endpoint")
    print(f"Target: {base_url}")
    print("=" * 80)

    async with httpx.AsyncClient(base_url=base_url) as client:
        try:
            resp = await client.get("/health")
            if resp.status_code != 200:
                print(f"ERROR: Health check failed ({resp.status_code})")
                return
            print(f"Health: {resp.json()}")
        except httpx.HTTPError as e:
            print(f"ERROR: Cannot connect to {base_url} — {e}")
            return

        listing = (await client.get("/api/articles", params={"limit": 1})).json()
        slug = listing["articles"][0]["slug"] if listing["articles"] else "missing"

        print()
        print(f"{'Endpoint':<45} {'Avg':>8} {'P50':>8} {'P95':>8} {'P99':>8} {'Ops':>8} {'Err':>4}")
        print("-" * 80)

        for name, path in ENDPOINTS:
            result = await benchmark_endpoint(client, name, path.format(slug=slug), iterations)

            if "error" in result:
                print(f"{result['name']:<45} {'ERROR':>8}")
            else:
                print(
                    f"{result['name']:<45} "
                    f"{result['avg_ms']:>7.1f}ms "
                    f"{result['p50_ms']:>7.1f}ms "
                    f"{result['p95_ms']:>7.1f}ms "
                    f"{result['p99_ms']:>7.1f}ms "
                    f"{str(result['ops']):>8} "
                    f"{result['errors']:>4}"
                )

        print("-" * 80)
        print("\nBenchmark complete.")


def main():
    parser = argparse.ArgumentParser(description="Benchmark Conduit API")
    parser.add_argument("-n", "--iterations", type=int, default=50, help="Iterations per endpoint")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="API base URL")
    args = parser.parse_args()
    asyncio.run(run_benchmark(args.base_url, args.iterations))


if __name__ == "__main__":
    main()
