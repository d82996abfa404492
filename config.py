import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    # Environment
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///documents.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Template catalog (YAML definitions seeded by `flask seed-catalog`)
    CATALOG_DIR = os.getenv('CATALOG_DIR')

    # Editing sessions save the answer buffer this often
    AUTOSAVE_INTERVAL_SECONDS = int(os.getenv('AUTOSAVE_INTERVAL_SECONDS', 600))

    # Artifact generation: 'pdf' writes files, 'mock' records calls only
    ARTIFACT_MODE = os.getenv('ARTIFACT_MODE', 'pdf')
    ARTIFACT_DIR = os.getenv('ARTIFACT_DIR', os.path.join(os.getcwd(), 'artifacts'))
    ARTIFACT_FONT_PATH = os.getenv('ARTIFACT_FONT_PATH')


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    ARTIFACT_MODE = 'mock'
    AUTOSAVE_INTERVAL_SECONDS = 600
    LOG_LEVEL = 'WARNING'
