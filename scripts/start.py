#!/usr/bin/env python3
"""
Production startup script.

1. Validates PORT
2. Checks that the CRM Web API answers with the configured credentials
   (warning only: the list views show their error banner until it does)
3. Starts gunicorn with one worker process and WEB_THREADS threads
   (replaces this process via os.execvp)

Usage:
    python scripts/start.py
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def check_crm() -> bool:
    from app.crm import create_app
    from app.crm.auth import CRMAuthError
    from app.crm.client import CRMError

    app = create_app()
    client = app.extensions["crm_client"]
    try:
        who = client.request_json("GET", "WhoAmI", retries=0)
    except (CRMError, CRMAuthError) as e:
        print(f"WARNING: CRM check failed: {e}", flush=True)
        return False
    print(f"CRM reachable (UserId={who.get('UserId')})", flush=True)
    return True


def gunicorn_argv(port: str, threads: int) -> list[str]:
    # One worker: the read stores live in process memory, and a write only
    # resets the stores of the process that handled it.
    return [
        "gunicorn",
        "app.wsgi:app",
        "--bind", f"0.0.0.0:{port}",
        "--workers", "1",
        "--threads", str(threads),
        "--timeout", "60",
        "--access-logfile", "-",
        "--error-logfile", "-",
    ]


def _threads() -> int:
    raw = os.environ.get("WEB_THREADS", "").strip()
    try:
        return max(int(raw), 1) if raw else 8
    except ValueError:
        print(f"WARNING: Invalid WEB_THREADS value '{raw}', using 8", flush=True)
        return 8


def main() -> None:
    port = os.environ.get("PORT", "").strip()
    if not port:
        print("WARNING: PORT not set, using default 8080", flush=True)
        port = "8080"

    try:
        port_int = int(port)
        if port_int < 1 or port_int > 65535:
            raise ValueError("Port out of range")
    except ValueError:
        print(f"ERROR: Invalid PORT value '{port}'. Must be integer 1-65535.", flush=True)
        sys.exit(1)

    print(f"PORT={port} validated", flush=True)

    print("=== Checking CRM connectivity ===", flush=True)
    check_crm()

    print("=== Starting gunicorn ===", flush=True)
    print(f"Gunicorn binding to 0.0.0.0:{port}", flush=True)

    os.execvp("gunicorn", gunicorn_argv(port, _threads()))


if __name__ == "__main__":
    main()
