#!/usr/bin/env python3
"""
Send a sample meeting payload to the relay's /webhook endpoint.

Usage:
    python3 scripts/send_test_webhook.py
    python3 scripts/send_test_webhook.py --url https://relay.example.com
    python3 scripts/send_test_webhook.py --env .env.production --no-signature
"""
import argparse
import json
import sys
from pathlib import Path

import httpx

# Add parent directory to path to import meeting_relay modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from meeting_relay.util.security import compute_signature


def load_env_var(key: str, env_file_name: str = ".env") -> str:
    """Load environment variable from specified .env file"""
    env_file = Path(__file__).parent.parent / env_file_name
    if env_file.exists():
        for line in env_file.read_text().splitlines():
            if line.startswith(f"{key}="):
                return line.split("=", 1)[1].strip().strip('"').strip("'")
    return ""


def main() -> int:
    parser = argparse.ArgumentParser(description="Send a test meeting webhook")
    parser.add_argument("--url", default="", help="Base URL of the relay (default: http://localhost:$PORT)")
    parser.add_argument("--env", default=".env", help="Env file to read WEBHOOK_SECRET/PORT from")
    parser.add_argument("--title", default="Weekly Sync", help="Meeting title to send")
    parser.add_argument("--no-signature", action="store_true", help="Do not sign the request")
    args = parser.parse_args()

    port = load_env_var("PORT", args.env) or "3000"
    base_url = args.url or f"http://localhost:{port}"
    webhook_url = f"{base_url.rstrip('/')}/webhook"
    secret = load_env_var("WEBHOOK_SECRET", args.env)
    header_name = load_env_var("SIGNATURE_HEADER", args.env) or "X-Signature"

    payload = {
        "meetingTitle": args.title,
        "date": "2024-01-01",
        "participants": ["Alice", "Bob"],
        "summary": "Discussed the Q1 roadmap and the release date for the mobile app.",
        "actionItems": ["Alice to draft the release plan", "Bob to book the launch review"],
    }
    body = json.dumps(payload).encode("utf-8")
    headers = {"Content-Type": "application/json"}

    print(f"📤 Sending test meeting to: {webhook_url}")
    if args.no_signature:
        print("⚠️  Sending without a signature")
    elif secret:
        headers[header_name] = compute_signature(secret, body)
        print(f"🔐 Signed with WEBHOOK_SECRET ({header_name})")
    else:
        print(f"⚠️  No WEBHOOK_SECRET in {args.env}; sending unsigned")

    try:
        resp = httpx.post(webhook_url, content=body, headers=headers, timeout=120.0)
    except httpx.HTTPError as e:
        print(f"❌ Request failed: {e}")
        return 1

    print(f"Status: {resp.status_code}")
    print(resp.text)
    try:
        ok = resp.status_code == 200 and bool(resp.json().get("success"))
    except ValueError:
        print("❌ Response was not JSON")
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
