"""Configuration loading utilities."""

import json
import os
from pathlib import Path

# Environment variables that override values from config.json.
ENV_OVERRIDES = {
    "SUPABASE_URL": ("supabase", "url"),
    "SUPABASE_ANON_KEY": ("supabase", "anon_key"),
    "SUPABASE_SERVICE_ROLE_KEY": ("supabase", "service_role_key"),
    "STRIPE_SECRET_KEY": ("stripe", "secret_key"),
    "STRIPE_WEBHOOK_SECRET": ("stripe", "webhook_secret"),
    "STRIPE_PRICE_PRO": ("stripe", "price_pro"),
    "SITE_URL": ("app", "site_url"),
    "RESUME_BUILDER_DATA_DIR": ("storage", "data_dir"),
}


def load_config(config_path: str | None = None) -> dict:
    """Load configuration from config.json and apply environment overrides."""
    if config_path is None:
        config_path = Path(__file__).parent / "config.json"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        config = json.load(f)

    _apply_env_overrides(config)
    return config


def _apply_env_overrides(config: dict) -> None:
    """Overlay non-empty environment variables onto the config sections."""
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config.setdefault(section, {})[key] = value


def get_anthropic_api_key() -> str:
    """Get Anthropic API key from environment."""
    key = os.environ.get("ANTHROPIC_API_KEY")
    if not key:
        raise ValueError(
            "ANTHROPIC_API_KEY environment variable not set. "
            "Set it with: export ANTHROPIC_API_KEY=your-key"
        )
    return key


def get_supabase_settings(config: dict, service_role: bool = False) -> tuple[str, str]:
    """Get the Supabase project URL and the key to use with it.

    Args:
        config: Loaded configuration.
        service_role: Return the service-role key instead of the anon key.
            Only server-side handlers (webhooks, checkout) should ask for it.

    Returns:
        (url, key) tuple.

    Raises:
        ValueError: If the URL or the requested key is not configured.
    """
    section = config.get("supabase", {})
    url = section.get("url", "")
    key_name = "service_role_key" if service_role else "anon_key"
    key = section.get(key_name, "")
    if not url or not key:
        env_name = "SUPABASE_SERVICE_ROLE_KEY" if service_role else "SUPABASE_ANON_KEY"
        raise ValueError(
            f"Supabase is not configured. Set SUPABASE_URL and {env_name}."
        )
    return url, key


def get_stripe_settings(config: dict) -> dict:
    """Get the Stripe section of the config."""
    return config.get("stripe", {})


def get_site_url(config: dict, origin: str | None = None) -> str:
    """Resolve the public site URL used for checkout redirects.

    Falls back to the request origin, then to localhost.
    """
    site_url = config.get("app", {}).get("site_url") or origin or "http://localhost:3000"
    return site_url.rstrip("/")


def get_usage_limits(config: dict) -> dict[str, int]:
    """Get monthly free-tier limits keyed by usage feature name."""
    return config.get("usage", {}).get("free_limits", {})


def get_retention_months(config: dict) -> int:
    """Get how many months of usage counters to keep."""
    return int(config.get("usage", {}).get("retention_months", 3))


def get_data_dir(config: dict) -> Path:
    """Get the data directory.

    Relative paths are resolved against the project root.
    """
    data_dir = Path(config.get("storage", {}).get("data_dir", "data"))
    if not data_dir.is_absolute():
        data_dir = Path(__file__).parent / data_dir
    return data_dir


def get_storage_path(config: dict) -> Path:
    """Get the path of the local key/value storage file."""
    return get_data_dir(config) / config.get("storage", {}).get("file", "local-storage.json")


def get_export_dir(config: dict) -> Path:
    """Get the directory exported documents are written to."""
    return get_data_dir(config) / "exports"


def get_generation_time_scale(config: dict) -> float:
    """Get the multiplier applied to cosmetic phase durations."""
    return float(config.get("generation", {}).get("time_scale", 1.0))


def get_min_input_chars(config: dict) -> int:
    """Get the minimum résumé / job description length accepted for generation."""
    return int(config.get("generation", {}).get("min_input_chars", 50))
