"""
Configuration for the Creator Rankings backend
Values come from the environment, optionally seeded from a .env file
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _int_env(name, default):
    value = os.environ.get(name)
    if value is None or value == '':
        return default
    return int(value)


class Config:
    ENVIRONMENT = os.environ.get('ENVIRONMENT', 'production')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Service account key used for local development
    SERVICE_ACCOUNT_PATH = os.environ.get(
        'GOOGLE_APPLICATION_CREDENTIALS',
        os.path.join(os.path.dirname(__file__), 'serviceAccountKey.json')
    )

    # Creator ranking
    RANKING_RECORD_LIMIT = _int_env('RANKING_RECORD_LIMIT', 500)
    PROFILE_BATCH_SIZE = _int_env('PROFILE_BATCH_SIZE', 10)
    RANKING_TOP_N = _int_env('RANKING_TOP_N', 20)

    # Post ranking
    POST_RANKING_FETCH_LIMIT = _int_env('POST_RANKING_FETCH_LIMIT', 100)
    POST_RANKING_TOP_N = _int_env('POST_RANKING_TOP_N', 50)

    # Genres
    GENRE_POSTS_LIMIT = _int_env('GENRE_POSTS_LIMIT', 50)
    GENRE_NAMES = [
        name.strip()
        for name in os.environ.get('GENRE_NAMES', 'ASMR,Cosplay,HowTo,Event').split(',')
        if name.strip()
    ]

    # Presentation
    DEFAULT_DISPLAY_NAME = os.environ.get('DEFAULT_DISPLAY_NAME', 'Anonymous')
    DEFAULT_AVATAR_URL = os.environ.get(
        'DEFAULT_AVATAR_URL',
        'https://images.unsplash.com/photo-1494790108755-2616c933448c?w=100&h=100&fit=crop&crop=face'
    )
    CURRENCY = os.environ.get('CURRENCY', 'JPY')
