import os
from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), '.env'))

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-prod'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///room_portal.db'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Auth
    TOKEN_TTL_HOURS = int(os.environ.get('TOKEN_TTL_HOURS', 24))
    OTP_TTL_MINUTES = int(os.environ.get('OTP_TTL_MINUTES', 5))
    OTP_LENGTH = 6

    # Listing
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100

    # Free-slot window for the availability board
    WORKING_HOURS_START = 8  # 8 AM
    WORKING_HOURS_END = 19   # 7 PM

class DevelopmentConfig(Config):
    DEBUG = True

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_LEVEL = 'DEBUG'

class ProductionConfig(Config):
    DEBUG = False
    # In prod, rely on env vars strictly
    SECRET_KEY = os.environ.get('SECRET_KEY')
