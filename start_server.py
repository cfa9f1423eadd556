#!/usr/bin/env python3
"""Start script for deployment that properly handles the PORT environment variable."""

import os
import sys
import subprocess

# Get PORT from environment, default to 8000
port = os.environ.get("PORT", "8000")

try:
    port_int = int(port)
except ValueError:
    print(f"Warning: Invalid PORT value '{port}', using default 8000", file=sys.stderr)
    port_int = 8000

log_level = os.environ.get("CAREFINDER_LOG_LEVEL", "info").lower()

# Set PYTHONPATH to include src directory
pythonpath = os.environ.get("PYTHONPATH", "")
src_path = os.path.abspath("src")
if not os.path.isdir(src_path):
    print(f"Warning: src directory not found at {src_path}", file=sys.stderr)
    src_path = os.getcwd()

os.environ["PYTHONPATH"] = f"{src_path}:{pythonpath}" if pythonpath else src_path
sys.path.insert(0, src_path)

# Single worker: map sessions live in process memory
cmd = [
    sys.executable,
    "-m",
    "uvicorn",
    "carefinder.main:app",
    "--host",
    "0.0.0.0",
    "--port",
    str(port_int),
    "--log-level",
    log_level,
    "--proxy-headers",
    "--forwarded-allow-ips", "*",
]

print(f"Starting server on port {port_int}...", file=sys.stderr)
print(f"PYTHONPATH={os.environ['PYTHONPATH']}", file=sys.stderr)

# Check if app module can be imported before starting
try:
    import carefinder.main  # noqa: F401
    print("✅ Successfully imported carefinder.main", file=sys.stderr)
except ImportError as e:
    print(f"❌ Failed to import carefinder.main (ImportError): {e}", file=sys.stderr)
    import traceback
    traceback.print_exc(file=sys.stderr)
    sys.exit(1)

try:
    result = subprocess.call(cmd)
    if result != 0:
        print(f"❌ Uvicorn exited with code {result}", file=sys.stderr)
    sys.exit(result)
except KeyboardInterrupt:
    print("⚠️ Server interrupted by user", file=sys.stderr)
    sys.exit(0)
