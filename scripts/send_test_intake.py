#!/usr/bin/env python3
"""
Dev helper: post a sample registration or tax-exempt upload to a running
Storefront Intake backend and print what came back.

The backend answers storefront forms with redirects, so redirects are NOT
followed: a 303 with a Location header is the success case.

Usage
-----
# Register a sample customer against localhost:8000
python scripts/send_test_intake.py register

# Register with a specific email and a phone that will not normalize
python scripts/send_test_intake.py register --email buyer@example.com --phone 123

# Upload a generated one-page PDF for customer 6543210
python scripts/send_test_intake.py upload --customer-id 6543210

# Upload a real file
python scripts/send_test_intake.py upload --customer-id 6543210 --file w9.pdf

# Target a different backend URL
python scripts/send_test_intake.py --url http://staging.example.com register

Warning: these hit the real commerce and mail platforms configured on the
backend. Use --dry-run to print the request without sending it.
"""

import argparse
import json
import sys
import textwrap
from pathlib import Path

import httpx
from dotenv import load_dotenv


# ---------------------------------------------------------------------------
# Sample content
# ---------------------------------------------------------------------------

def _make_sample_pdf() -> bytes:
    """Return a minimal single-page PDF as bytes."""
    return (
        b"%PDF-1.4\n"
        b"1 0 obj << /Type /Catalog /Pages 2 0 R >> endobj\n"
        b"2 0 obj << /Type /Pages /Kids [3 0 R] /Count 1 >> endobj\n"
        b"3 0 obj << /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >> endobj\n"
        b"trailer << /Root 1 0 R >>\n"
        b"%%EOF\n"
    )


# ---------------------------------------------------------------------------
# Pretty printer
# ---------------------------------------------------------------------------

def _print_response(response: httpx.Response) -> None:
    status = response.status_code
    symbol = "OK" if status in (302, 303) else "FAIL"
    print(f"\n[{symbol}] HTTP {status}")
    if "location" in response.headers:
        print(f"Location  : {response.headers['location']}")
    if "set-cookie" in response.headers:
        print(f"Set-Cookie: {response.headers['set-cookie']}")
    if response.text:
        print(response.text)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _register(args: argparse.Namespace) -> httpx.Request:
    payload = {
        "companyName": args.company,
        "firstName": args.first_name,
        "lastName": args.last_name,
        "email": args.email,
        "companyWebsite": args.website,
        "phoneNumber": args.phone,
    }
    print(json.dumps(payload, indent=2))
    return httpx.Request("POST", f"{args.url.rstrip('/')}/register", json=payload)


def _upload(args: argparse.Namespace) -> httpx.Request:
    if args.file:
        file_path = Path(args.file)
        if not file_path.exists():
            raise FileNotFoundError(file_path)
        content = file_path.read_bytes()
        filename = file_path.name
    else:
        content = _make_sample_pdf()
        filename = "sample_tax_exempt_form.pdf"

    print(f"Customer  : {args.customer_id} ({args.company})")
    print(f"File      : {filename} ({len(content):,} bytes)")
    return httpx.Request(
        "POST",
        f"{args.url.rstrip('/')}/upload",
        data={"customerId": args.customer_id, "customerCompany": args.company},
        files={"tax_exempt_form": (filename, content)},
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> int:
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")

    parser = argparse.ArgumentParser(
        prog="send_test_intake.py",
        description="Send a sample registration or upload to the intake backend.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Examples:
              python scripts/send_test_intake.py register
              python scripts/send_test_intake.py upload --customer-id 6543210
              python scripts/send_test_intake.py --dry-run upload --file w9.pdf
        """),
    )
    parser.add_argument(
        "--url",
        default="http://localhost:8000",
        help="Backend base URL (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the request without sending it.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    register = subparsers.add_parser("register", help="POST /register")
    register.add_argument("--company", default="Acme Supply")
    register.add_argument("--first-name", default="Test")
    register.add_argument("--last-name", default="Buyer")
    register.add_argument("--email", default="buyer@example.com")
    register.add_argument("--website", default="acme-supply.example")
    register.add_argument("--phone", default="555-123-4567")
    register.set_defaults(build=_register)

    upload = subparsers.add_parser("upload", help="POST /upload")
    upload.add_argument("--customer-id", required=True, help="Numeric customer id")
    upload.add_argument("--company", default="Acme Supply")
    upload.add_argument(
        "--file",
        default=None,
        metavar="PATH",
        help="PNG, JPG or PDF to upload. A sample PDF is used if omitted.",
    )
    upload.set_defaults(build=_upload)

    args = parser.parse_args()

    try:
        request = args.build(args)
    except FileNotFoundError as exc:
        print(f"ERROR: File not found: {exc}", file=sys.stderr)
        return 1

    print(f"\nEndpoint  : {request.method} {request.url}")
    if args.dry_run:
        print("[DRY RUN] Not sent.")
        return 0

    try:
        with httpx.Client(timeout=60) as client:
            response = client.send(request, follow_redirects=False)
    except httpx.ConnectError:
        print(
            f"\nERROR: Could not connect to {args.url}\n"
            "Is the backend running? Start it with:\n"
            "  cd backend && uvicorn app.main:app --reload",
            file=sys.stderr,
        )
        return 1

    _print_response(response)
    return 0 if response.status_code in (302, 303) else 1


if __name__ == "__main__":
    sys.exit(main())
