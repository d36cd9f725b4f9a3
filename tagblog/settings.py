# settings.py
from pathlib import Path
import os
from dotenv import load_dotenv

# ---------------------- PATHS & ENV ----------------------
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv()

# ---------------------- SECURITY / DEBUG ----------------------
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-change-me")
DEBUG = os.getenv("DEBUG", "True") == "True"
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost").split(",") if h.strip()]

# ---------------------- DJANGO CORE ----------------------
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Local apps
    "articles.apps.ArticlesConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "tagblog.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
                "articles.context_processors.popular_tags",
            ],
        },
    },
]

WSGI_APPLICATION = "tagblog.wsgi.application"

# ---------------------- DATABASE ----------------------
# POSTGRES_DB가 있으면 PostgreSQL, 없으면 로컬 SQLite
if os.getenv("POSTGRES_DB"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB"),
            "USER": os.getenv("POSTGRES_USER", "postgres"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", ""),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

# ---------------------- INTERNATIONALIZATION ----------------------
LANGUAGE_CODE = "ko-kr"
TIME_ZONE = "Asia/Seoul"
USE_I18N = True
USE_TZ = True

# ---------------------- STATIC FILES ----------------------
STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ---------------------- TAGS ----------------------
TAG_DELIMITERS = os.getenv("TAG_DELIMITERS", ",\n")
TAG_MAX_LENGTH = int(os.getenv("TAG_MAX_LENGTH", "50"))
TAG_ALLOWED_PATTERN = os.getenv("TAG_ALLOWED_PATTERN", r"^[0-9a-z가-힣][0-9a-z가-힣 ._+#-]*$") or None
TAG_CONFLICT_RETRIES = int(os.getenv("TAG_CONFLICT_RETRIES", "3"))
POPULAR_TAGS_LIMIT = int(os.getenv("POPULAR_TAGS_LIMIT", "8"))

# ---------------------- LOGGING ----------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "[{asctime}] {levelname} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "articles": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
