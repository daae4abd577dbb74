"""Django settings for the learning management service.

Values come from the environment so the same module serves local runs,
tests and deployments. Database access goes through Django's ORM; SQLite
is the default and PostgreSQL is selected with ``DB_ENGINE=postgresql``.
"""

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_float(value: str | None, default: float) -> float:
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class DatabaseSettings:
    engine: str = os.getenv("DB_ENGINE", "sqlite")
    name: str = os.getenv("DB_NAME", str(BASE_DIR / "lms.sqlite3"))
    host: str = os.getenv("DB_HOST", "localhost")
    port: str = os.getenv("DB_PORT", "5432")
    user: str = os.getenv("DB_USER", "lms_user")
    password: str = os.getenv("DB_PASSWORD", "")

    def as_django(self) -> dict:
        if self.engine == "postgresql":
            return {
                "ENGINE": "django.db.backends.postgresql",
                "NAME": self.name,
                "HOST": self.host,
                "PORT": self.port,
                "USER": self.user,
                "PASSWORD": self.password,
            }
        return {"ENGINE": "django.db.backends.sqlite3", "NAME": self.name}


SECRET_KEY = os.getenv(
    "DJANGO_SECRET_KEY",
    "dev-only-secret-key-change-me-0123456789abcdefghijklmnop",
)
DEBUG = _get_bool(os.getenv("DJANGO_DEBUG"), default=False)
ALLOWED_HOSTS = os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "rest_framework",
    "drf_spectacular",
    "simple_history",
    "LearningManagementApp.core.apps.CoreConfig",
    "LearningManagementApp.users.apps.UsersConfig",
    "LearningManagementApp.courses.apps.CoursesConfig",
    "LearningManagementApp.learning.apps.LearningConfig",
    "LearningManagementApp.messaging.apps.MessagingConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "simple_history.middleware.HistoryRequestMiddleware",
]

ROOT_URLCONF = "LearningManagementApp.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {"context_processors": ["django.template.context_processors.request"]},
    },
]

DATABASES = {"default": DatabaseSettings().as_django()}

AUTH_USER_MODEL = "users.User"
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {"min_length": int(os.getenv("LMS_MIN_PASSWORD_LENGTH", "6"))},
    },
]
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("DJANGO_TIME_ZONE", "UTC")
USE_I18N = False
USE_TZ = True

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.IsAuthenticated"],
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 50,
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=int(os.getenv("JWT_EXPIRES_MINUTES", "60"))),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=1),
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Learning Management API",
    "DESCRIPTION": "Courses, enrollments, assignments, quizzes, grading and notifications.",
    "VERSION": "1.0.0",
}

# Defaults for the persisted platform configuration row.
LMS = {
    "PASS_THRESHOLD": _get_float(os.getenv("LMS_PASS_THRESHOLD"), 70.0),
    "NOTIFICATIONS_ENABLED": _get_bool(os.getenv("LMS_NOTIFICATIONS_ENABLED"), default=True),
}

LOG_LEVEL = os.getenv("LMS_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LMS_LOG_FILE")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "detailed": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "simple": {"format": "%(levelname)s - %(message)s"},
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": LOG_LEVEL,
            "formatter": "detailed",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "LearningManagementApp": {"level": "DEBUG", "handlers": ["console"], "propagate": False},
        "django": {"level": "WARNING", "handlers": ["console"]},
    },
}

if LOG_FILE:
    LOGGING["handlers"]["file"] = {
        "class": "logging.FileHandler",
        "level": "DEBUG",
        "formatter": "detailed",
        "filename": LOG_FILE,
        "mode": "a",
    }
    LOGGING["loggers"]["LearningManagementApp"]["handlers"].append("file")
