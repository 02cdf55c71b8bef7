#!/usr/bin/env python3
"""
Deployment check for a running storefront backend.

Probes the health endpoint, the CORS configuration for the storefront
origin, and the public product API. Run with:
    storefront-check-env --backend-url https://api.example.com --frontend-url https://shop.example.com
"""

import argparse
import os
import sys
from dataclasses import dataclass, field
from typing import List, Optional

import requests
from dotenv import load_dotenv

DEFAULT_TIMEOUT = 10.0


@dataclass
class CheckResult:
    name: str
    passed: bool
    message: str
    hints: List[str] = field(default_factory=list)


def check_health(http: requests.Session, backend_url: str, timeout: float) -> CheckResult:
    """/health must answer 200 with a JSON body"""
    url = f"{backend_url}/health"
    try:
        response = http.get(url, timeout=timeout)
    except requests.RequestException as e:
        return CheckResult("health", False, f"Could not reach {url}: {e}", [
            "Check that the backend is deployed and the URL is correct",
            "Check that the service is listening on the expected port",
        ])

    if response.status_code != 200:
        return CheckResult("health", False, f"{url} answered {response.status_code}", [
            "A 503 means the database is unreachable: check DATABASE_URL",
        ])

    try:
        body = response.json()
    except ValueError:
        return CheckResult("health", False, f"{url} did not answer with JSON", [
            "Another service may be answering on this URL",
        ])

    return CheckResult("health", True, f"status={body.get('status')} database={body.get('database')}")


def check_cors(http: requests.Session, backend_url: str, frontend_url: str, timeout: float) -> CheckResult:
    """The backend must echo the storefront origin (or *) in Access-Control-Allow-Origin"""
    url = f"{backend_url}/health"
    try:
        response = http.get(url, headers={"Origin": frontend_url}, timeout=timeout)
    except requests.RequestException as e:
        return CheckResult("cors", False, f"Could not reach {url}: {e}")

    allowed = response.headers.get("Access-Control-Allow-Origin")
    if allowed in (frontend_url, "*"):
        return CheckResult("cors", True, f"Access-Control-Allow-Origin: {allowed}")

    return CheckResult("cors", False, f"Origin {frontend_url} is not allowed (got {allowed!r})", [
        f"Add {frontend_url} to APP_URL on the backend",
        "Separate several origins with commas",
    ])


def check_api(http: requests.Session, backend_url: str, timeout: float) -> CheckResult:
    """The product listing must answer 200 (or 401 behind an auth proxy)"""
    url = f"{backend_url}/api/v1/products"
    try:
        response = http.get(url, params={"limit": 1}, timeout=timeout)
    except requests.RequestException as e:
        return CheckResult("api", False, f"Could not reach {url}: {e}")

    if response.status_code in (200, 401):
        return CheckResult("api", True, f"{url} answered {response.status_code}")
    return CheckResult("api", False, f"{url} answered {response.status_code}", [
        "Check the backend logs for the failing request",
    ])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check a deployed storefront backend")
    parser.add_argument(
        "--backend-url",
        default=os.getenv("STOREFRONT_BACKEND_URL"),
        help="Base URL of the backend (env: STOREFRONT_BACKEND_URL)",
    )
    parser.add_argument(
        "--frontend-url",
        default=os.getenv("APP_URL", "http://localhost:3000").split(",")[0].strip(),
        help="Storefront origin that must pass CORS (env: APP_URL)",
    )
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Request timeout in seconds")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    if not args.backend_url:
        print("❌ No backend URL configured")
        print("💡 Pass --backend-url or set STOREFRONT_BACKEND_URL")
        return 2

    backend_url = args.backend_url.rstrip("/")
    print("🔧 Storefront Deployment Check")
    print("=" * 40)
    print(f"Backend:  {backend_url}")
    print(f"Frontend: {args.frontend_url}")

    with requests.Session() as http:
        results = [
            check_health(http, backend_url, args.timeout),
            check_cors(http, backend_url, args.frontend_url, args.timeout),
            check_api(http, backend_url, args.timeout),
        ]

    print()
    for result in results:
        print(f"{'✅' if result.passed else '❌'} {result.name}: {result.message}")
        for hint in result.hints:
            print(f"   💡 {hint}")

    # The API probe is informational; health and CORS decide the outcome
    required = [r for r in results if r.name in ("health", "cors")]
    if all(r.passed for r in required):
        print("\n✅ All required checks passed!")
        return 0
    print("\n❌ Required checks failed")
    return 1


if __name__ == "__main__":
    sys.exit(main())
