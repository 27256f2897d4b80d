"""
Application package for the PortMaster Library Checker
"""
from flask import Flask
from flask_wtf.csrf import CSRFProtect
import os

from utils.cache import TTLCache
from utils.constants import DEFAULT_CACHE_TTL_SECONDS, DEFAULT_HTTP_TIMEOUT, FALLBACK_HTTP_TIMEOUT, TEMPLATES_DIR
from utils.errors import register_error_handlers


def create_app(test_config=None):
    """Application factory pattern for Flask"""
    app = Flask(__name__, template_folder=str(TEMPLATES_DIR))

    # Configuration
    secret_key = os.environ.get('SECRET_KEY')
    if not secret_key:
        import secrets
        secret_key = secrets.token_hex(32)
        print("⚠️  WARNING: No SECRET_KEY environment variable set. Using generated key.")
        print("⚠️  Set SECRET_KEY environment variable for production use.")
    app.config['SECRET_KEY'] = secret_key
    app.config['STEAM_API_KEY'] = os.environ.get('STEAM_API_KEY', '')
    app.config['CACHE_TTL_SECONDS'] = float(os.environ.get('CACHE_TTL_SECONDS', DEFAULT_CACHE_TTL_SECONDS))
    app.config['HTTP_TIMEOUT'] = float(os.environ.get('HTTP_TIMEOUT', DEFAULT_HTTP_TIMEOUT))
    app.config['FALLBACK_HTTP_TIMEOUT'] = float(os.environ.get('FALLBACK_HTTP_TIMEOUT', FALLBACK_HTTP_TIMEOUT))
    # Optional httpx transport for upstream requests (tests use httpx.MockTransport)
    app.config['HTTP_TRANSPORT'] = None

    if test_config:
        app.config.update(test_config)

    if not app.config['STEAM_API_KEY']:
        print("⚠️  WARNING: No STEAM_API_KEY set. Steam comparisons will be unavailable.")

    # Initialize extensions
    csrf = CSRFProtect(app)

    # Services shared by all requests
    from portcheck.services import CatalogService, SteamClient, build_platforms

    transport = app.config['HTTP_TRANSPORT']
    app.cache = TTLCache(app.config['CACHE_TTL_SECONDS'])
    app.catalog_service = CatalogService(
        app.cache,
        timeout=app.config['HTTP_TIMEOUT'],
        fallback_timeout=app.config['FALLBACK_HTTP_TIMEOUT'],
        transport=transport,
    )
    steam_client = SteamClient(
        app.config['STEAM_API_KEY'],
        app.cache,
        timeout=app.config['HTTP_TIMEOUT'],
        transport=transport,
    )
    app.platforms = build_platforms(steam_client)

    # Register blueprints
    from routes.main import main_bp
    from routes.compare import compare_bp
    from routes.api import api_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(compare_bp)
    app.register_blueprint(api_bp)

    # The JSON API is called by scripts, not by our forms
    csrf.exempt(api_bp)

    # Error handlers
    register_error_handlers(app)

    return app
