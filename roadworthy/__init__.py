"""
Roadworthy Inspections - Flask Application Factory
Vehicle roadworthy inspections with per-item photo capture
"""
import logging
import os
from flask import Flask

DEFAULT_MAX_UPLOAD_MB = 10
LOGO_MAX_BYTES = 5 * 1024 * 1024


def _configure_logging(level_name):
    level = getattr(logging, str(level_name).upper(), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
        )
    logging.getLogger('roadworthy').setLevel(level)


def create_app(test_config=None):
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-change-in-prod')
    app.config['DATABASE_PATH'] = os.environ.get('DATABASE_PATH', 'data/roadworthy.db')
    app.config['UPLOAD_DIR'] = os.environ.get('UPLOAD_DIR', 'uploads')
    app.config['BACKUP_DIR'] = os.environ.get('BACKUP_DIR', 'network_uploads')
    app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('MAX_UPLOAD_MB', DEFAULT_MAX_UPLOAD_MB)) * 1024 * 1024
    app.config['LOGO_MAX_BYTES'] = LOGO_MAX_BYTES
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')

    if test_config is not None:
        app.config.update(test_config)

    # Relative paths resolve against the working directory, not the package
    for key in ('DATABASE_PATH', 'UPLOAD_DIR', 'BACKUP_DIR'):
        app.config[key] = os.path.abspath(app.config[key])
    app.config.setdefault('LOGO_DIR', os.path.join(app.config['UPLOAD_DIR'], 'logos'))

    for key in ('UPLOAD_DIR', 'LOGO_DIR', 'BACKUP_DIR'):
        os.makedirs(app.config[key], exist_ok=True)

    _configure_logging(app.config['LOG_LEVEL'])

    from roadworthy.errors import register_error_handlers
    register_error_handlers(app)

    # Initialize database and seed settings
    from roadworthy.services.db import init_db
    from roadworthy.services.storage import ensure_settings
    init_db(app)
    with app.app_context():
        ensure_settings()

    # Register blueprints
    from roadworthy.routes.inspections import inspections_bp
    from roadworthy.routes.settings import settings_bp
    from roadworthy.routes.files import files_bp

    app.register_blueprint(inspections_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(files_bp)

    return app
