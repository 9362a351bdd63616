#!/usr/bin/env python3
"""
Smoke test for the search API.

Run against a live server with an ingested document:
  python scripts/smoke_search.py --document-id <id>

Options:
  --base-url         API URL (default: http://localhost:8000)
  --timeout          Per-request timeout (seconds)
  --allow-mock       Do not fail when the API answers in mock mode
  --print-results    Print result texts
"""

import argparse
import sys

import httpx


DEFAULT_BASE_URL = "http://localhost:8000"

TESTS = [
    {"query": "introduction", "params": {"limit": 5, "minScore": 0.0}},
    {"query": "summary of the main results", "params": {"limit": 3, "offset": 1, "minScore": 0.0}},
    {"query": "definition", "params": {"limit": 5, "rerank": "false", "enhanceContext": "false"}},
]


def check_response(data: dict, params: dict, allow_mock: bool) -> list[str]:
    errors = []

    for key in ("query", "results", "totalResults", "mode", "document", "searchParams"):
        if key not in data:
            errors.append(f"missing field: {key}")
    if errors:
        return errors

    if data["mode"] == "mock" and not allow_mock:
        errors.append("API answered in mock mode")

    limit = int(params.get("limit", 10))
    if len(data["results"]) > limit:
        errors.append(f"{len(data['results'])} results exceed limit {limit}")

    min_score = float(params.get("minScore", 0.5))
    if data["mode"] == "vector":
        low = [r["score"] for r in data["results"] if r["score"] < min_score]
        if low:
            errors.append(f"scores below minScore: {low}")

    return errors


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--document-id", required=True)
    parser.add_argument("--timeout", type=float, default=60)
    parser.add_argument("--allow-mock", action="store_true")
    parser.add_argument("--print-results", action="store_true")
    args = parser.parse_args()

    url = f"{args.base_url}/files/{args.document_id}/search"
    failures = 0

    with httpx.Client(timeout=args.timeout) as client:
        health = client.get(f"{args.base_url}/health").json()
        print("HEALTH:", health)

        for idx, test in enumerate(TESTS, start=1):
            params = {"query": test["query"], **test["params"]}
            print(f"\nQ{idx}: {test['query']} {test['params']}")

            resp = client.get(url, params=params)
            if resp.status_code != 200:
                failures += 1
                print(f"FAIL: HTTP {resp.status_code}: {resp.text[:200]}")
                continue

            data = resp.json()
            if args.print_results:
                for r in data.get("results", []):
                    print(f"  {r['score']:.3f} {r['text'][:100]!r}")

            errors = check_response(data, test["params"], args.allow_mock)
            if errors:
                failures += 1
                print("FAIL:", "; ".join(errors))
            else:
                print(f"OK ({data['mode']}, {data['totalResults']} total)")

        resp = client.post(url, json={"query": "test", "unknownField": 1})
        if resp.status_code != 400:
            failures += 1
            print(f"\nFAIL: unknown POST field returned HTTP {resp.status_code}")
        else:
            print("\nOK: unknown POST field rejected")

    if failures:
        print(f"\nFAILED: {failures} check(s) failed")
        sys.exit(1)
    print("\nALL OK")


if __name__ == "__main__":
    main()
