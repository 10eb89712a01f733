import os
import atexit
import logging
from flask import Flask, jsonify, send_from_directory
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_bcrypt import Bcrypt
from flask_migrate import Migrate
from flask_restx import Api
from vetclinic.config import Config

logger = logging.getLogger(__name__)

migrate = Migrate()
db = SQLAlchemy()
jwt = JWTManager()
bcrypt = Bcrypt()


def build_api():
    return Api(
        title='VetCare Clinic API',
        version='1.0',
        description='Veterinary clinic management: owners, pets, appointments, prescriptions and reminders',
        doc='/docs',
        ui_config={
            'displayOperationId': True,
            'docExpansion': 'none',
            'filter': True,
            'defaultModelsExpandDepth': 1,
            'defaultModelExpandDepth': 1
        },
        security=[{'BearerAuth': []}],
        authorizations={
            'BearerAuth': {
                'type': 'apiKey',
                'in': 'header',
                'name': 'Authorization',
                'description': 'Enter your JWT token as "Bearer <token>"'
            }
        }
    )


def create_app(config_class=Config, **overrides):
    app = Flask(__name__, static_url_path='/static')
    app.config.from_object(config_class)
    app.config.update(overrides)
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    bcrypt.init_app(app)
    api = build_api()
    api.init_app(app)

    # Create the upload directory if it doesn't exist
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    # Route for serving uploaded files
    @app.route('/uploads/<path:filename>')
    def uploaded_file(filename):
        return send_from_directory(os.path.abspath(app.config['UPLOAD_FOLDER']), filename)

    # Enable CORS
    CORS(app, resources={r"/*": {"origins": app.config.get('CORS_ORIGINS', '*')}},
         supports_credentials=app.config.get('CORS_SUPPORTS_CREDENTIALS', True),
         allow_headers=app.config.get('CORS_ALLOW_HEADERS', ["Content-Type", "Authorization"]),
         methods=app.config.get('CORS_METHODS', ["GET", "POST", "PUT", "DELETE", "OPTIONS"]))

    # Background email pool
    from .services.email_service import EmailDispatcher
    dispatcher = EmailDispatcher.from_config(app.config)
    app.extensions['email_dispatcher'] = dispatcher
    atexit.register(dispatcher.shutdown)

    from .utils.auth_middleware import setup_auth_middleware
    setup_auth_middleware(app)

    from .routes import register_namespaces
    register_namespaces(api)

    @app.errorhandler(403)
    def forbidden(error):
        return jsonify({
            'message': 'You do not have permission to perform this operation',
            'error': str(error)
        }), 403

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'message': 'Resource not found', 'error': str(error)}), 404

    with app.app_context():
        from . import models  # noqa: F401
        db.create_all()

    logger.info(f"VetCare app created with database {app.config['SQLALCHEMY_DATABASE_URI'].split('@')[-1]}")
    return app
