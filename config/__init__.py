import os

SETTINGS_MODULES = {
    "production": "config.production",
    "prod": "config.production",
    "testing": "config.testing",
    "test": "config.testing",
}


def get_settings_module() -> str:
    """Settings module for ``APP_ENV`` (anything unknown falls back to development)."""
    env = os.getenv("APP_ENV", "development").strip().lower()
    return SETTINGS_MODULES.get(env, "config.development")
