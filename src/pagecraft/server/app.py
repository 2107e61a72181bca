"""
pagecraft - Conversion API server
Flask application exposing the HTML <-> document tree conversion.
"""

import logging
from typing import Optional

from flask import Flask

from pagecraft.model import EngineSettings
from pagecraft.server.routers.convert_router import convert_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[EngineSettings] = None) -> Flask:
    """
    Application factory. The engine settings are resolved once and injected
    into the app config for blueprint access.
    """
    flask_app = Flask(__name__)

    flask_app.config['ENGINE_SETTINGS'] = settings or EngineSettings.from_config()
    flask_app.json.sort_keys = False

    flask_app.register_blueprint(convert_router, url_prefix='/api')
    logger.debug("Registered routes: %s", [str(rule) for rule in flask_app.url_map.iter_rules()])
    return flask_app
