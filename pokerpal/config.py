import os
import secrets
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Application configuration settings"""

    # Environment
    ENVIRONMENT = os.getenv('ENVIRONMENT', os.getenv('NODE_ENV', 'development'))
    PRODUCTION = ENVIRONMENT.lower() == 'production'
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///pokerpal.db')

    # Web server settings
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', 5000))

    # Session settings
    SESSION_SECRET = os.getenv('SESSION_SECRET', '')
    SESSION_COOKIE_NAME = os.getenv('SESSION_COOKIE_NAME', 'pokerpal.sid')
    SESSION_MAX_AGE = int(os.getenv('SESSION_MAX_AGE', 7 * 24 * 60 * 60))  # 7 days

    # Auth settings
    BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', 12))

    # Upload settings
    UPLOAD_DIR = os.getenv('UPLOAD_DIR', 'uploads')
    USE_CLOUD_STORAGE = PRODUCTION or os.getenv('USE_CLOUD_STORAGE', 'False').lower() == 'true'

    # S3-compatible storage (Cloudflare R2)
    R2_ACCOUNT_ID = os.getenv('R2_ACCOUNT_ID')
    R2_ACCESS_KEY_ID = os.getenv('R2_ACCESS_KEY_ID')
    R2_SECRET_ACCESS_KEY = os.getenv('R2_SECRET_ACCESS_KEY')
    R2_BUCKET_NAME = os.getenv('R2_BUCKET_NAME')
    R2_PUBLIC_URL = os.getenv('R2_PUBLIC_URL')

    # Logging
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

    @classmethod
    def get_session_secret(cls) -> str:
        """Get the session signing secret, generating one for this process if unset"""
        if not cls.SESSION_SECRET:
            # Sessions reset on restart when no secret is configured
            cls.SESSION_SECRET = secrets.token_hex(32)
        return cls.SESSION_SECRET

    @classmethod
    def has_cloud_credentials(cls) -> bool:
        return all([
            cls.R2_ACCOUNT_ID,
            cls.R2_ACCESS_KEY_ID,
            cls.R2_SECRET_ACCESS_KEY,
            cls.R2_BUCKET_NAME,
        ])

    @classmethod
    def is_cloud_storage_enabled(cls) -> bool:
        """Cloud uploads are used only when requested and fully configured"""
        return cls.USE_CLOUD_STORAGE and cls.has_cloud_credentials()

    @classmethod
    def get_async_database_url(cls) -> str:
        """Convert a plain sqlite URL to its aiosqlite form"""
        database_url = cls.DATABASE_URL
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        return database_url

    @classmethod
    def validate(cls):
        """Validate that configuration is consistent"""
        if cls.SESSION_MAX_AGE <= 0:
            raise ValueError("SESSION_MAX_AGE must be a positive number of seconds")
        if cls.BCRYPT_ROUNDS < 4 or cls.BCRYPT_ROUNDS > 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        if os.getenv('USE_CLOUD_STORAGE', 'False').lower() == 'true' and not cls.has_cloud_credentials():
            raise ValueError(
                "USE_CLOUD_STORAGE requires R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, "
                "R2_SECRET_ACCESS_KEY and R2_BUCKET_NAME"
            )
