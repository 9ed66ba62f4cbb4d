"""Flask application factory."""
from flask import Flask, request, jsonify
from flask_wtf.csrf import CSRFProtect, CSRFError
from werkzeug.exceptions import HTTPException
import os


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    csrf = CSRFProtect(app)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        app.logger.warning(f"CSRF Error: {e.description}")
        return jsonify({'status': 'error', 'message': 'Session expired. Reload the page.'}), 400

    # Sentry error tracking in production
    if os.getenv('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get('ENV'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Redis cache for the tier catalog
    from pos_billing.services.cache_service import init_cache
    init_cache(app)

    # Prometheus metrics instrumentation
    from pos_billing.blueprints.metrics import setup_metrics_instrumentation
    setup_metrics_instrumentation(app)

    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=0)

    from pos_billing.middleware import load_operator_context

    @app.before_request
    def before_request_handler():
        load_operator_context()

    # Error Handlers
    from pos_billing.exceptions import PosError, BusinessLogicError
    from pos_billing.blueprints.metrics import cart_rejections_total

    @app.errorhandler(PosError)
    def handle_pos_error(error):
        """Render application exceptions as JSON."""
        if isinstance(error, BusinessLogicError):
            app.logger.info(f"Rejected [{error.status_code}]: {error.message}")
            cart_rejections_total.labels(reason=type(error).__name__).inc()
        else:
            app.logger.error(f"PosError [{error.status_code}]: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'status': 'error', 'message': 'Not Found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'status': 'error', 'message': 'Method Not Allowed'}), 405

    @app.errorhandler(500)
    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'status': 'error', 'message': error.description}), error.code
        app.logger.error(f"Unhandled Exception on {request.path}: {error}", exc_info=True)
        return jsonify({'status': 'error', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from pos_billing.blueprints.auth import auth_bp
    from pos_billing.blueprints.cart import cart_bp
    from pos_billing.blueprints.pos import pos_bp
    from pos_billing.blueprints.quick_sale import quick_sale_bp
    from pos_billing.blueprints.metrics import metrics_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(pos_bp)
    app.register_blueprint(quick_sale_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(metrics_bp)

    from pos_billing.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"BACKEND_API_URL={app.config.get('BACKEND_API_URL')}")

    return app
