"""
Centralized configuration for the workshop notifier.

Every setting comes from the environment (loaded from .env.local / .env by
main.py). Missing provider keys only disable the matching capability.
"""

import os

DEFAULT_TARGET_TIMEZONE = "Asia/Taipei"


def is_dev_mode() -> bool:
    """Check if running in development mode (--dev flag or DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def is_production() -> bool:
    """Check if running on Railway (production environment)."""
    return bool(os.environ.get("RAILWAY_ENVIRONMENT"))


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "8000"))


def get_target_timezone() -> str:
    """
    Name of the single timezone the business operates in.

    Schedule fire times are always computed in this zone, never in the
    server's local zone.
    """
    return os.getenv("TARGET_TIMEZONE", DEFAULT_TARGET_TIMEZONE)


def get_poll_interval_minutes() -> int:
    """Minutes between two scans of pending schedules."""
    return int(os.getenv("POLL_INTERVAL_MINUTES", "10"))


def get_poll_warmup_seconds() -> int:
    """Delay before the first scan after startup."""
    return int(os.getenv("POLL_WARMUP_SECONDS", "15"))


def get_operator_discord_ids() -> list[str]:
    """Discord user IDs that receive dispatch summaries and registration alerts."""
    raw = os.environ.get("OPERATOR_DISCORD_IDS", "")
    return [part.strip() for part in raw.split(",") if part.strip()]


def get_capabilities() -> dict[str, bool]:
    """Which optional integrations are configured."""
    return {
        "openai": bool(os.environ.get("OPENAI_API_KEY")),
        "gemini": bool(os.environ.get("GEMINI_API_KEY")),
        "email": bool(os.environ.get("SENDGRID_API_KEY")),
        "discord": bool(os.environ.get("DISCORD_BOT_TOKEN")),
        "operators": bool(get_operator_discord_ids()),
    }


# Environment variables checked at startup
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string (falls back to memory)", False),
    ("JWT_SECRET", "Secret key for operator JWT tokens", True),
    ("SENDGRID_API_KEY", "SendGrid API key for email delivery", False),
    ("OPENAI_API_KEY", "Primary content provider key", False),
    ("GEMINI_API_KEY", "Secondary content provider key", False),
    ("DISCORD_BOT_TOKEN", "Discord bot token for chat push", False),
]


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Only JWT_SECRET is fatal (in production); everything else degrades.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []
    in_dev = is_dev_mode()

    for name, description, required_in_dev in REQUIRED_ENV_VARS:
        value = os.environ.get(name)

        if not value:
            if is_production() and required_in_dev:
                errors.append(f"  ✗ {name}: Not set ({description})")
            elif required_in_dev or not in_dev:
                warnings.append(f"  ⚠ {name}: Not set ({description})")

    if errors:
        for error in errors:
            print(error)
        return False, warnings

    return True, warnings
