import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev_secret_change_me')
    TOKEN_SECRET = os.environ.get('TOKEN_SECRET', SECRET_KEY)
    TOKEN_MAX_AGE = timedelta(days=7)

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///taskflow.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    CLIENT_ORIGIN = os.environ.get('CLIENT_ORIGIN', 'http://localhost:5173')

    GOOGLE_API_KEY = os.environ.get('GOOGLE_API_KEY') or os.environ.get('GEMINI_API_KEY')
    GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-1.5-flash')

    SUMMARY_LIST_DEFAULT_LIMIT = 30
    SUMMARY_LIST_MAX_LIMIT = 365

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    PORT = int(os.environ.get('PORT', 4000))


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key-for-testing-only'
    TOKEN_SECRET = SECRET_KEY
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    GOOGLE_API_KEY = None
