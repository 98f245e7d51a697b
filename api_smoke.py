"""
API Smoke Testing Script
Logs in against a running llantera API and times the main GET endpoints.

This script:
1. Authenticates with email/password and keeps the JWT access token
2. Requests the catalog, pricing, inventory, orders, notifications and report endpoints
3. Records status and response time for each endpoint
4. Prints a summary report and optionally saves the results as JSON

Usage:
    python api_smoke.py --base-url http://127.0.0.1:8000/api/v1 --email admin@example.com
"""

import argparse
import getpass
import json
import os
import sys
import time
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import requests

DEFAULT_BASE_URL = os.environ.get('LLANTERA_API_URL', 'http://127.0.0.1:8000/api/v1')
REQUEST_TIMEOUT = 30


class APITester:
    """Class to handle API smoke testing and response time measurement"""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.results: List[Dict] = []
        self.session = session or requests.Session()
        self.access_token = None

    def authenticate(self, email: str, password: str) -> bool:
        """Authenticate and keep the access token for later requests"""
        try:
            print(f"🔐 Authenticating as {email}...")
            response = self.session.post(
                f"{self.base_url}/auth/login/",
                json={"email": email, "password": password},
                timeout=10
            )
        except requests.exceptions.RequestException as e:
            print(f"❌ Authentication error: {e}")
            return False

        if response.status_code != 200:
            print(f"❌ Authentication failed: {response.status_code}")
            print(f"Response: {response.text[:200]}")
            return False

        self.access_token = response.json().get('access')
        self.session.headers.update({'Authorization': f'Bearer {self.access_token}'})
        print("✅ Authentication successful!")
        return True

    def test_endpoint(self, name: str, endpoint: str, params: Optional[Dict] = None) -> Dict:
        """Request one endpoint and record its status and response time"""
        url = f"{self.base_url}{endpoint}"
        result = {
            'name': name,
            'endpoint': endpoint,
            'params': params or {},
            'timestamp': datetime.now().isoformat(),
        }

        try:
            start_time = time.time()
            response = self.session.get(url, params=params, timeout=REQUEST_TIMEOUT)
            result['response_time_ms'] = round((time.time() - start_time) * 1000, 2)
        except requests.exceptions.Timeout:
            result.update(status_code=0, response_time_ms=REQUEST_TIMEOUT * 1000, success=False,
                          error=f'Request timeout ({REQUEST_TIMEOUT}s)')
            self.results.append(result)
            return result
        except requests.exceptions.RequestException as e:
            result.update(status_code=0, response_time_ms=0, success=False, error=str(e))
            self.results.append(result)
            return result

        result['status_code'] = response.status_code
        result['success'] = response.status_code == 200

        try:
            data = response.json()
        except ValueError:
            data = None
            result['response_text'] = response.text[:200]

        if isinstance(data, list):
            result['item_count'] = len(data)
        elif isinstance(data, dict) and 'results' in data:
            result['item_count'] = len(data['results'])
            result['total_count'] = data.get('total')

        if not result['success']:
            result['error'] = response.text[:500]

        self.results.append(result)
        return result

    def print_result(self, result: Dict):
        status_icon = "✅" if result['success'] else "❌"
        print(f"{status_icon} {result['name']}")
        print(f"   Endpoint: {result['endpoint']}")
        print(f"   Status: {result['status_code']}")
        print(f"   Response Time: {result['response_time_ms']}ms")
        if result.get('item_count') is not None:
            print(f"   Items: {result['item_count']}")
        if result.get('total_count') is not None:
            print(f"   Total Count: {result['total_count']}")
        if not result['success'] and result.get('error'):
            print(f"   Error: {result['error'][:200]}")
        print()

    def summary(self) -> Dict:
        successful = [r for r in self.results if r['success']]
        average = sum(r['response_time_ms'] for r in successful) / len(successful) if successful else 0
        return {
            'total_tests': len(self.results),
            'successful_tests': len(successful),
            'failed_tests': len(self.results) - len(successful),
            'average_response_time_ms': round(average, 2),
            'slowest': max(successful, key=lambda r: r['response_time_ms'])['name'] if successful else None,
        }

    def generate_report(self):
        """Print a summary report of all tests"""
        summary = self.summary()
        print("\n" + "=" * 80)
        print("📊 API SMOKE TEST REPORT")
        print("=" * 80)
        print(f"Base URL: {self.base_url}")
        print(f"Test Date: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"\nTotal Tests: {summary['total_tests']}")
        print(f"Successful: {summary['successful_tests']} ✅")
        print(f"Failed: {summary['failed_tests']} ❌")
        print(f"\nAverage Response Time: {summary['average_response_time_ms']:.2f}ms")
        if summary['slowest']:
            print(f"Slowest: {summary['slowest']}")

        if summary['failed_tests']:
            print("\n" + "-" * 80)
            print("❌ FAILED TESTS")
            print("-" * 80)
            for result in self.results:
                if not result['success']:
                    print(f"\n{result['name']}")
                    print(f"  Endpoint: {result['endpoint']}")
                    print(f"  Error: {result.get('error', 'Unknown error')[:200]}")
        print("\n" + "=" * 80)

    def save_results(self, filename: str):
        with open(filename, 'w') as f:
            json.dump({
                'test_date': datetime.now().isoformat(),
                'base_url': self.base_url,
                **self.summary(),
                'results': self.results
            }, f, indent=2)
        print(f"\n💾 Results saved to {filename}")


def smoke_endpoints() -> List[tuple]:
    """(name, endpoint, params) for every endpoint the smoke run requests"""
    today = datetime.now().strftime('%Y-%m-%d')
    last_week = (datetime.now() - timedelta(days=7)).strftime('%Y-%m-%d')
    return [
        ("Auth - Current User", "/auth/me/", None),
        ("Catalog - Public List", "/catalog/tires/", {"limit": 50}),
        ("Catalog - In Stock Sorted by Price", "/catalog/tires/", {"in_stock_only": "true", "sort": "price"}),
        ("Catalog - Search", "/catalog/tires/", {"search": "205 55"}),
        ("Catalog - Admin List", "/tires/admin/", {"limit": 50}),
        ("Catalog - Brands", "/brands/", None),
        ("Catalog - Tire Types", "/tire-types/", None),
        ("Pricing - Columns", "/price-columns/", None),
        ("Pricing - Levels", "/price-levels/", None),
        ("Inventory - Stock List", "/inventory/", {"limit": 50}),
        ("Inventory - Low Stock", "/inventory/", {"low_stock": "true"}),
        ("Orders - Admin List", "/admin/orders/", {"limit": 20}),
        ("Orders - Pending Invoices", "/admin/orders/", {"invoice": "sin_factura"}),
        ("Orders - Cart", "/cart/", None),
        ("Notifications - List", "/notifications/", None),
        ("Notifications - Unread Count", "/notifications/unread-count/", None),
        ("Reports - Sales (Last 7 days)", "/reports/sales/", {"date_from": last_week, "date_to": today}),
    ]


def run(tester: APITester, verbose: bool = True) -> Dict:
    for name, endpoint, params in smoke_endpoints():
        result = tester.test_endpoint(name, endpoint, params)
        if verbose:
            tester.print_result(result)
    return tester.summary()


def main(argv=None):
    parser = argparse.ArgumentParser(description='Smoke test a running llantera API')
    parser.add_argument('--base-url', default=DEFAULT_BASE_URL)
    parser.add_argument('--email', default=os.environ.get('LLANTERA_API_EMAIL', ''))
    parser.add_argument('--password', default=os.environ.get('LLANTERA_API_PASSWORD', ''))
    parser.add_argument('--output', default='', help='Save the results to this JSON file')
    args = parser.parse_args(argv)

    print("=" * 80)
    print("🧪 API SMOKE TESTING TOOL")
    print("=" * 80)
    print(f"Target: {args.base_url}\n")

    email = args.email or input("Enter email: ")
    password = args.password or getpass.getpass("Enter password: ")

    tester = APITester(args.base_url)
    if not tester.authenticate(email, password):
        print("❌ Authentication failed. Cannot proceed with tests.")
        return 1

    summary = run(tester)
    tester.generate_report()
    if args.output:
        tester.save_results(args.output)
    return 0 if summary['failed_tests'] == 0 else 2


if __name__ == '__main__':
    sys.exit(main())
