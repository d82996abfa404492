import logging

import click
from flask import Flask, jsonify
from flask_login import LoginManager
from flask_migrate import Migrate

from config import Config
from models import db, User
from routes import register_blueprints
from services.documents import TemplateLoader, ConfigurationError


def configure_logging(app):
    logging.basicConfig(
        level=getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    Migrate(app, db)

    login_manager = LoginManager()
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Authentication required'}), 401

    # Register blueprints
    register_blueprints(app)

    @app.cli.command('seed-catalog')
    @click.option('--catalog-dir', default=None, help='Directory holding categories.yml and templates/')
    def seed_catalog(catalog_dir):
        """Validate the template catalog and insert anything missing."""
        try:
            TemplateLoader.load_all(catalog_dir or app.config.get('CATALOG_DIR'))
        except ConfigurationError as e:
            raise click.ClickException(str(e))
        db.create_all()
        created = TemplateLoader.seed()
        click.echo(f"Created {created['categories']} categories and {created['templates']} templates")

    return app


app = create_app()

if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    app.run(host='0.0.0.0', port=5005, debug=True)
