import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')
    ADMIN_API_KEY = os.getenv('ADMIN_API_KEY')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'postgresql://localhost/credibility')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True, 'pool_size': 5}

    # Scoring: hash level
    SCORE_BASE = float(os.getenv('SCORE_BASE', '50'))
    SCORE_MAX_VERIFICATION_BONUS = float(os.getenv('SCORE_MAX_VERIFICATION_BONUS', '50'))
    SCORE_MAX_IMPLICIT_BONUS = float(os.getenv('SCORE_MAX_IMPLICIT_BONUS', '20'))
    SCORE_VERIFICATION_WEIGHTS = {
        'Provenance': 10,
        'Content': 15,
        'Full': 25,
    }
    SCORE_SEVERITY_WEIGHTS = {
        'Negligible': 5,
        'Moderate': 15,
        'Major': 30,
    }
    SCORE_CULPABILITY_MULTIPLIERS = {
        'NoFault': 0.5,
        'Systemic': 0.75,
        'Preventable': 1.0,
        'Reckless': 1.5,
        'Intentional': 2.0,
    }
    SCORE_IMPLICIT_REVIEW_POINTS = float(os.getenv('SCORE_IMPLICIT_REVIEW_POINTS', '3'))
    SCORE_IMPLICIT_REVIEW_MIN_DAYS = int(os.getenv('SCORE_IMPLICIT_REVIEW_MIN_DAYS', '7'))

    # Provider multiplier: linear from MIN (score 0) to MAX (score 100)
    SCORE_PROVIDER_MULTIPLIER_MIN = float(os.getenv('SCORE_PROVIDER_MULTIPLIER_MIN', '0.5'))
    SCORE_PROVIDER_MULTIPLIER_MAX = float(os.getenv('SCORE_PROVIDER_MULTIPLIER_MAX', '1.5'))
    SCORE_NEUTRAL_PROVIDER = float(os.getenv('SCORE_NEUTRAL_PROVIDER', '50'))
    SCORE_PROVIDER_PARTITION_SIZE = int(os.getenv('SCORE_PROVIDER_PARTITION_SIZE', '30'))

    # Scoring: user level
    SCORE_VERIFICATION_ACCURACY_WEIGHT = float(os.getenv('SCORE_VERIFICATION_ACCURACY_WEIGHT', '10'))
    SCORE_DISPUTE_ACCURACY_WEIGHT = float(os.getenv('SCORE_DISPUTE_ACCURACY_WEIGHT', '10'))
    SCORE_IDENTITY_BONUS = float(os.getenv('SCORE_IDENTITY_BONUS', '5'))
    SCORE_VERIFIED_PROVIDER_BONUS = float(os.getenv('SCORE_VERIFIED_PROVIDER_BONUS', '10'))
    SCORE_FLAG_PENALTY = float(os.getenv('SCORE_FLAG_PENALTY', '5'))

    # Bump whenever any weight or formula above changes
    SCORE_CALCULATION_VERSION = int(os.getenv('SCORE_CALCULATION_VERSION', '1'))

    # Scheduler
    SCHEDULER_ENABLED = os.getenv('SCHEDULER_ENABLED', 'true').lower() == 'true'
    SCHEDULER_API_ENABLED = False
    SWEEP_HOUR = int(os.getenv('SWEEP_HOUR', '3'))
    SWEEP_MINUTE = int(os.getenv('SWEEP_MINUTE', '15'))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class TestConfig(Config):
    TESTING = True
    ADMIN_API_KEY = 'test-admin-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}  # SQLite doesn't support pool_size
    SCHEDULER_ENABLED = False
    SCORE_CALCULATION_VERSION = 1
