#!/usr/bin/env python3
"""Helper script to check and create the .env file for the proximity service."""

from pathlib import Path
import os

ENV_TEMPLATE = """# Supabase Configuration (optional; without it practitioners come from the JSON file)
# Get these from: https://supabase.com/dashboard → Your Project → Settings → API
CAREFINDER_SUPABASE_URL=https://your-project-id.supabase.co
CAREFINDER_SUPABASE_KEY=your-service-role-key-here

# API Configuration
CAREFINDER_API_PREFIX=/api
# CAREFINDER_FRONTEND_ALLOWED_ORIGINS - Leave commented to use defaults
# If you need to override, use JSON array format: ["http://localhost:3000"]

# Data Paths
CAREFINDER_PRACTITIONERS_FILE=./data/practitioners.json

# Routing (optional; without a key every route is a straight-line estimate)
CAREFINDER_GEOAPIFY_API_KEY=
"""

WATCHED_VARIABLES = ("CAREFINDER_GEOAPIFY_API_KEY", "CAREFINDER_SUPABASE_URL", "CAREFINDER_SUPABASE_KEY")


def _mask(value: str) -> str:
    if len(value) > 20:
        return value[:12] + "..." + value[-6:]
    return value


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Environment Variables Checker")
    print("=" * 60)
    print()

    if env_file.exists():
        print(f"✅ Found .env file at: {env_file}")
        print()
        print("Current contents:")
        print("-" * 60)
        with open(env_file, "r", encoding="utf-8") as f:
            for line in f.read().split("\n"):
                name, sep, value = line.partition("=")
                if sep and name.strip() in ("CAREFINDER_SUPABASE_KEY", "CAREFINDER_GEOAPIFY_API_KEY"):
                    print(f"{name}={_mask(value.strip())}")
                else:
                    print(line)
        print("-" * 60)
        print()
    else:
        print(f"❌ .env file NOT found at: {env_file}")
        print()
        print("Creating template .env file...")
        with open(env_file, "w", encoding="utf-8") as f:
            f.write(ENV_TEMPLATE)
        print(f"✅ Created .env file at: {env_file}")
        print()
        print("⚠️  Edit .env to add your routing key and, optionally, Supabase credentials.")
        return

    print("Checking environment variables...")
    print()
    for name in WATCHED_VARIABLES:
        value = os.getenv(name)
        if value:
            print(f"✅ {name} (from environment): {_mask(value)}")
        else:
            print(f"➖ {name} not found in environment (may still come from .env)")
    print()

    print("Testing config loading...")
    print()
    try:
        import sys
        sys.path.insert(0, str(project_root / "src"))
        from carefinder.config import settings

        if settings.geoapify_api_key:
            print("✅ Routing key loaded: routes will follow roads")
        else:
            print("⚠️  Routing key missing: routes will be straight-line estimates")

        if settings.supabase_url and settings.supabase_key:
            print("✅ Supabase configured: practitioners come from the database")
        else:
            print(f"ℹ️  Supabase not configured: practitioners come from {settings.practitioners_file}")
            if not settings.practitioners_file.exists():
                print("❌ ERROR: practitioner file does not exist either")
        print()
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print()
        print("Make sure you're running this from the project root directory")


if __name__ == "__main__":
    main()
