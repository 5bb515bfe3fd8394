import os
import secrets
import sys
from pathlib import Path
from typing import Literal

import dj_database_url
import sentry_sdk
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sentry_sdk.integrations.django import DjangoIntegration

from gnapserver import __version__

BASE_DIR = Path(__file__).resolve().parent.parent


Environments = Literal["development", "production", "test"]

GNAP_ENV_FILE = os.environ.get(
    "GNAP_ENV_FILE", "test.env" if "pytest" in sys.modules else ".env"
)


class Settings(BaseSettings):
    """
    Pydantic-powered settings, to provide consistent error messages, strong
    typing, consistent prefixes, .env support, etc.
    """

    model_config = SettingsConfigDict(
        env_prefix="GNAP_",
        env_file=str(BASE_DIR / GNAP_ENV_FILE),
        env_file_encoding="utf-8",
        # Case sensitivity doesn't work on Windows, so might as well be
        # consistent from the get-go.
        case_sensitive=False,
        extra="ignore",
    )

    #: The default database, as a URL dj-database-url understands.
    DATABASE_SERVER: str = f"sqlite:///{BASE_DIR / 'gnap.sqlite3'}"

    #: The currently running environment, used for things such as sentry
    #: error reporting.
    ENVIRONMENT: Environments = "development"

    #: Should django run in debug mode?
    DEBUG: bool = False

    #: Set a secret key used for signing values such as sessions. Randomized
    #: by default, so you'll logout everytime the process restarts.
    SECRET_KEY: str = Field(default_factory=lambda: "autokey-" + secrets.token_hex(128))

    #: If set, a list of allowed values for the HOST header. The default value
    #: of '*' means any host will be accepted.
    ALLOWED_HOSTS: list[str] = Field(default_factory=lambda: ["*"])

    #: An optional Sentry DSN for error reporting.
    SENTRY_DSN: str | None = None
    SENTRY_SAMPLE_RATE: float = 1.0
    SENTRY_TRACES_SAMPLE_RATE: float = 0.01

    #: Base URI of this authorization server; interaction and finish URLs
    #: are built under it, and it is the issuer of every token we sign.
    ISSUER: str = "https://auth.example.com"

    #: How long grants, continuation tokens and access tokens live, in seconds.
    TOKEN_LIFETIME: int = 3600

    #: How long an offered interaction stays usable, in seconds.
    INTERACTION_TIMEOUT: int = 300

    #: How often `runcleanup` sweeps expired grants, tokens and interactions.
    CLEANUP_INTERVAL: int = 3600

    LOG_LEVEL: str = "INFO"

    @field_validator("ISSUER")
    @classmethod
    def strip_issuer(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("TOKEN_LIFETIME", "INTERACTION_TIMEOUT", "CLEANUP_INTERVAL")
    @classmethod
    def positive_seconds(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive number of seconds")
        return value


SETUP = Settings()

# Don't allow automatic keys in production
if SETUP.ENVIRONMENT == "production" and SETUP.SECRET_KEY.startswith("autokey-"):
    print("You must set GNAP_SECRET_KEY in production")
    sys.exit(1)
SECRET_KEY = SETUP.SECRET_KEY
DEBUG = SETUP.DEBUG

# Application definition

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "core",
    "stator",
    "clients",
    "grants",
    "resources",
    "interactions",
    "tokens",
]

MIDDLEWARE = [
    "core.middleware.SentryTaggingMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "core.middleware.HeadersMiddleware",
    "core.middleware.ContinuationTokenMiddleware",
]

ROOT_URLCONF = "gnapserver.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "gnapserver.wsgi.application"

DATABASES = {"default": dj_database_url.parse(SETUP.DATABASE_SERVER, conn_max_age=600)}

LANGUAGE_CODE = "en-us"

TIME_ZONE = "UTC"

USE_I18N = True

USE_TZ = True

STATIC_URL = "static/"

STATIC_ROOT = BASE_DIR / "static-collected"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

ALLOWED_HOSTS = SETUP.ALLOWED_HOSTS

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"handlers": ["console"], "level": SETUP.LOG_LEVEL},
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}

GNAP_ISSUER = SETUP.ISSUER
GNAP_TOKEN_LIFETIME = SETUP.TOKEN_LIFETIME
GNAP_INTERACTION_TIMEOUT = SETUP.INTERACTION_TIMEOUT
GNAP_CLEANUP_INTERVAL = SETUP.CLEANUP_INTERVAL

if SETUP.SENTRY_DSN:
    sentry_sdk.init(
        dsn=SETUP.SENTRY_DSN,
        integrations=[
            DjangoIntegration(),
        ],
        traces_sample_rate=SETUP.SENTRY_TRACES_SAMPLE_RATE,
        sample_rate=SETUP.SENTRY_SAMPLE_RATE,
        send_default_pii=False,
        environment=SETUP.ENVIRONMENT,
    )
    sentry_sdk.set_tag("gnap.version", __version__)
