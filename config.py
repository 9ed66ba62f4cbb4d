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

    # Session Configuration (Production-safe defaults)
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    PERMANENT_SESSION_LIFETIME = 86400  # 24 hours

    # Remote REST backend (products, tiers, customers, sales)
    BACKEND_API_URL = os.getenv('BACKEND_API_URL', 'http://localhost:8000').rstrip('/')
    BACKEND_TIMEOUT = int(os.getenv('BACKEND_TIMEOUT', '10'))  # seconds

    # Display
    CURRENCY_SYMBOL = os.getenv('CURRENCY_SYMBOL', '₹')

    # Redis Cache Configuration
    # Read-only tier/rule catalog snapshots, shared between workers
    REDIS_URL = os.getenv('REDIS_URL', 'redis://redis:6379/0')
    CACHE_ENABLED = os.getenv('CACHE_ENABLED', 'true').lower() == 'true'
    CACHE_DEFAULT_TTL = int(os.getenv('CACHE_DEFAULT_TTL', '60'))  # seconds
    CACHE_CATALOG_TTL = int(os.getenv('CACHE_CATALOG_TTL', '300'))
    CACHE_KEY_PREFIX = os.getenv('CACHE_KEY_PREFIX', 'pos')


class TestingConfig(Config):
    """Configuration used by the test suite."""

    TESTING = True
    DEBUG = False
    ENV = 'testing'
    WTF_CSRF_ENABLED = False
    CACHE_ENABLED = False
    BACKEND_API_URL = 'http://backend.test'
