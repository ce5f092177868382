from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container
from .emotions.controller import register as register_emotions
from .storage.factory import StorageSettings

logger = logging.getLogger(__name__)


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["PORT"] = int(getattr(settings, "PORT", 8080))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("settings=%s", settings_module)

    if container is None:
        container = build_container(settings=StorageSettings.from_settings(settings))

    register_emotions(app, container)
    return app


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=application.config["PORT"])
