"""Flask application factory."""
import logging
import os
import traceback

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from comandas.database import init_db


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Initialize Sentry for error tracking in production
    if app.config.get('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=app.config['SENTRY_DSN'],
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Push transport client (VAPID), injected into the notification fan-out
    from comandas.services.push_client import init_push
    init_push(app)

    # Prometheus metrics instrumentation
    from comandas.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    # Production: Enable ProxyFix for HTTPS behind Nginx reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_for=1,      # Trust X-Forwarded-For with 1 proxy
            x_proto=1,    # Trust X-Forwarded-Proto
            x_host=1,     # Trust X-Forwarded-Host
            x_port=1,     # Trust X-Forwarded-Port
            x_prefix=0    # No prefix (not behind a URL prefix)
        )

    # Initialize database
    init_db(app)

    # Bearer token: load caller claims before each request
    from comandas.middleware import load_current_user

    @app.before_request
    def before_request_handler():
        load_current_user()

    # Error Handlers
    from comandas.exceptions import AppError

    @app.errorhandler(AppError)
    def handle_app_error(error):
        """Handle custom application exceptions."""
        if error.status_code >= 500:
            app.logger.error(f"AppError [{error.status_code}]: {error.message}")
        else:
            app.logger.warning(f"AppError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        # 404 unknown route, 405 wrong method, 400 bad request...
        return jsonify({'status': 'error', 'message': error.description}), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception: {error}")
        app.logger.error(f"Traceback: {traceback.format_exc()}")
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from comandas.blueprints.auth import auth_bp
    from comandas.blueprints.users import users_bp
    from comandas.blueprints.catalog import catalog_bp
    from comandas.blueprints.orders import orders_bp
    from comandas.blueprints.push import push_bp
    from comandas.blueprints.main import main_bp
    from comandas.blueprints.metrics import metrics_bp

    api_prefix = app.config.get('API_PREFIX', '/api').rstrip('/')
    for blueprint in (auth_bp, users_bp, catalog_bp, orders_bp, push_bp):
        app.register_blueprint(blueprint, url_prefix=f"{api_prefix}{blueprint.url_prefix or ''}")

    app.register_blueprint(main_bp)
    app.register_blueprint(metrics_bp)

    # Register CLI commands
    from comandas.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"API mounted at '{api_prefix or '/'}'")
    app.logger.info(f"PUSH_FANOUT_ASYNC={app.config.get('PUSH_FANOUT_ASYNC')}")

    return app
