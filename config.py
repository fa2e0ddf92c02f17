"""Configuration module for Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Error tracking (only used when ENV=production)
    SENTRY_DSN = os.getenv('SENTRY_DSN', '')

    # All API routes are mounted under this prefix (health and metrics are not)
    API_PREFIX = os.getenv('API_PREFIX', '/api')

    # Bearer tokens
    JWT_SECRET = os.getenv('JWT_SECRET') or SECRET_KEY
    JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
    JWT_EXPIRES_SECONDS = int(os.getenv('JWT_EXPIRES_SECONDS', '3600'))  # 1 hour

    # Database - Support multiple environment variable naming conventions
    # Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        # Try DB_* variables (Docker style)
        DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'comandas')
        DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'comandas')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'comandas')

        DATABASE_URL = (
            f"postgresql://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'

    # Web Push (VAPID)
    # Generate a key pair with: vapid --gen  (py-vapid, installed with pywebpush)
    VAPID_PUBLIC_KEY = os.getenv('VAPID_PUBLIC_KEY') or os.getenv('NEXT_PUBLIC_VAPID_PUBLIC_KEY', '')
    VAPID_PRIVATE_KEY = os.getenv('VAPID_PRIVATE_KEY', '')
    VAPID_SUBJECT = os.getenv('VAPID_SUBJECT', 'mailto:admin@localhost')
    PUSH_TTL = int(os.getenv('PUSH_TTL', '86400'))  # seconds the push service keeps the message
    PUSH_TIMEOUT = int(os.getenv('PUSH_TIMEOUT', '10'))
    PUSH_MAX_WORKERS = int(os.getenv('PUSH_MAX_WORKERS', '10'))
    # Run the order-closed fan-out in a background thread
    PUSH_FANOUT_ASYNC = os.getenv('PUSH_FANOUT_ASYNC', 'true').lower() == 'true'

    # Notification content
    NOTIFICATION_ICON = os.getenv('NOTIFICATION_ICON', '/firebase-logo.png')
    NOTIFICATION_URL = os.getenv('NOTIFICATION_URL', '/dashboard')


class TestConfig(Config):
    """Configuration used by the test suite."""

    TESTING = True
    DEBUG = False
    ENV = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
    JWT_SECRET = 'test-jwt-secret'
    VAPID_PUBLIC_KEY = 'test-vapid-public-key'
    VAPID_PRIVATE_KEY = 'test-vapid-private-key'
    VAPID_SUBJECT = 'mailto:test@localhost'
    PUSH_FANOUT_ASYNC = False
