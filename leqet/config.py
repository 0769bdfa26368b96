import os
from datetime import timedelta


def _env_flag(name, default="False"):
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///leqet.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT, stored in an httpOnly cookie or sent as a Bearer header
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'dev-jwt-secret-change-me')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=7)
    JWT_TOKEN_LOCATION = ['cookies', 'headers']
    JWT_HEADER_NAME = 'Authorization'
    JWT_HEADER_TYPE = 'Bearer'
    JWT_ACCESS_COOKIE_NAME = 'leqet_session'
    JWT_ACCESS_COOKIE_PATH = '/'
    JWT_COOKIE_SECURE = True
    JWT_COOKIE_SAMESITE = 'Lax'
    JWT_COOKIE_CSRF_PROTECT = True

    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:5173,http://localhost:3000').split(',')

    # Rate limiting
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_ENABLED = True
    AUTH_CODE_RATE_LIMIT = os.getenv('AUTH_CODE_RATE_LIMIT', '5 per 15 minutes')
    LOGIN_RATE_LIMIT = os.getenv('LOGIN_RATE_LIMIT', '10 per 15 minutes')

    # Account codes
    PASSWORD_MIN_LENGTH = 6
    ACTIVATION_OTP_TTL = timedelta(minutes=15)
    PASSWORD_RESET_TTL = timedelta(minutes=10)
    ACTIVATION_OTP_MAX_ATTEMPTS = 5

    # Mail (activation and reset codes)
    MAIL_SERVER = os.getenv('MAIL_SERVER')
    MAIL_PORT = int(os.getenv('MAIL_PORT', 587))
    MAIL_USERNAME = os.getenv('MAIL_USERNAME')
    MAIL_PASSWORD = os.getenv('MAIL_PASSWORD')
    MAIL_USE_TLS = _env_flag('MAIL_USE_TLS', 'True')
    MAIL_USE_SSL = _env_flag('MAIL_USE_SSL', 'False')
    MAIL_DEFAULT_SENDER = os.getenv('MAIL_DEFAULT_SENDER', 'Leqet Gym <no-reply@leqet.local>')
    MAIL_TIMEOUT = int(os.getenv('MAIL_TIMEOUT', 12))

    # External catalogues
    EDAMAM_APP_ID = os.getenv('EDAMAM_APP_ID')
    EDAMAM_APP_KEY = os.getenv('EDAMAM_APP_KEY')
    API_NINJAS_KEY = os.getenv('API_NINJAS_KEY')
    EXTERNAL_API_TIMEOUT = int(os.getenv('EXTERNAL_API_TIMEOUT', 10))

    # Maintenance and monitoring
    BACKUP_DIR = os.getenv('BACKUP_DIR', 'backups')
    PG_DUMP_PATH = os.getenv('PG_DUMP_PATH', 'pg_dump')
    DB_STORAGE_LIMIT_BYTES = int(os.getenv('DB_STORAGE_LIMIT_BYTES', 100 * 1024 ** 3))
    BANDWIDTH_LIMIT_BYTES_24H = int(os.getenv('BANDWIDTH_LIMIT_BYTES_24H', 200 * 1024 ** 3))
    SYSTEM_LOG_RETENTION_DAYS = 30

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True
    JWT_COOKIE_SECURE = False


class ProductionConfig(Config):
    DEBUG = False
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')
    PREFERRED_URL_SCHEME = 'https'


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_SECRET_KEY = 'testing-jwt-secret-with-enough-length-for-hs256'
    JWT_COOKIE_SECURE = False
    JWT_COOKIE_CSRF_PROTECT = False
    RATELIMIT_ENABLED = False
    MAIL_SERVER = None
    EDAMAM_APP_ID = None
    EDAMAM_APP_KEY = None
    API_NINJAS_KEY = None


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
