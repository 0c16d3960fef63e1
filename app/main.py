"""
ASGI entry point for Money Tracker.

    uvicorn app.main:app --host 0.0.0.0 --port 8000

Backends and credentials come from the environment / .env
(see money_tracker.config.settings).
"""

from money_tracker.api import create_app
from money_tracker.config import validate_all_settings


def _check_settings() -> None:
    """Fail at startup, with every problem listed, if configuration is incomplete."""
    results = validate_all_settings()
    errors = {k: v for k, v in results.items() if k.endswith("_error")}
    if errors:
        details = "; ".join(f"{k[:-len('_error')]}: {v}" for k, v in errors.items())
        raise RuntimeError(f"Invalid configuration: {details}")


_check_settings()
app = create_app()
