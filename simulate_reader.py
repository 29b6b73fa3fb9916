#!/usr/bin/env python
"""
RFID Reader Simulator

Plays the part of the checkout reader: reports a tag scan and then asks the
API to settle the tag's pending carts.

Usage:
    python simulate_reader.py 04:A3:2B:1C --api-key ESP_SHARED_KEY
    python simulate_reader.py 04a32b1c --api-key KEY --url http://localhost:10000
    python simulate_reader.py 04a32b1c --scan-only
"""
import argparse
import os
import sys
from typing import Any, Dict

import httpx


def post_scan(client: httpx.Client, api_url: str, rfid_uid: str) -> Dict[str, Any]:
    """
    Report a tag read.

    Raises:
        httpx.HTTPError: If API request fails
    """
    response = client.post(f"{api_url}/rfidScan", json={"rfid_uid": rfid_uid})
    response.raise_for_status()
    return response.json()


def post_transaction(
    client: httpx.Client,
    api_url: str,
    rfid_uid: str,
    api_key: str,
) -> httpx.Response:
    """
    Request settlement of all pending carts for a tag.

    Returns the raw response: 400/404 are normal outcomes at a till.
    """
    return client.post(
        f"{api_url}/transaction",
        json={"rfid_uid": rfid_uid},
        headers={"x-api-key": api_key},
    )


def main():
    """Main entry point for the script."""
    parser = argparse.ArgumentParser(
        description="Simulate an RFID reader against the RFID Pay API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s 04:A3:2B:1C --api-key SECRET
  %(prog)s 04a32b1c --url http://localhost:10000 --api-key SECRET
  %(prog)s 04a32b1c --scan-only
        """
    )

    parser.add_argument(
        "rfid_uid",
        type=str,
        help="Tag UID as the reader would send it"
    )

    parser.add_argument(
        "--url",
        type=str,
        default="http://localhost:10000",
        help="Base API URL (default: http://localhost:10000)"
    )

    parser.add_argument(
        "--api-key",
        type=str,
        default=os.environ.get("API_KEY"),
        help="Shared reader key (default: $API_KEY)"
    )

    parser.add_argument(
        "--scan-only",
        action="store_true",
        help="Only report the scan, do not settle"
    )

    parser.add_argument(
        "--timeout",
        type=int,
        default=30,
        help="Request timeout in seconds (default: 30)"
    )

    args = parser.parse_args()

    if not args.scan_only and not args.api_key:
        print("Error: --api-key or $API_KEY is required to settle", file=sys.stderr)
        sys.exit(1)

    with httpx.Client(timeout=args.timeout) as client:
        try:
            scan = post_scan(client, args.url, args.rfid_uid)
            print(f"Scan recorded for {scan['rfid_uid']}")

            if args.scan_only:
                return

            response = post_transaction(client, args.url, args.rfid_uid, args.api_key)
        except httpx.HTTPError as e:
            print(f"Request failed: {e}", file=sys.stderr)
            if hasattr(e, "response") and e.response is not None:
                print(f"   API Response: {e.response.text}", file=sys.stderr)
            sys.exit(1)

    body = response.json()
    if response.status_code == 200:
        print(f"{body['message']}: charged {body['total']}, balance {body['balance']}")
        print(f"   Transaction: {body['transactionId']}")
        return

    print(f"Declined ({response.status_code}): {body.get('message')}", file=sys.stderr)
    sys.exit(2)


if __name__ == "__main__":
    main()
