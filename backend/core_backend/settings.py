"""
Django settings for the inventory ledger backend.

Every deployment-specific value is read from the environment so the same
module serves development, tests and production.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-dev-key-change-me")
DEBUG = env_bool("DEBUG", True)
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Third party
    "rest_framework",
    "django_filters",
    # Local apps
    "core_backend.apps.CoreBackendConfig",
    "measurements.apps.MeasurementsConfig",
    "materials.apps.MaterialsConfig",
    "inventory.apps.InventoryConfig",
    "sections.apps.SectionsConfig",
    "cogs.apps.CogsConfig",
    "purchasing.apps.PurchasingConfig",
    "budgets.apps.BudgetsConfig",
    "reports.apps.ReportsConfig",
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

ROOT_URLCONF = "core_backend.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "core_backend.wsgi.application"
ASGI_APPLICATION = "core_backend.asgi.application"

# Database: SQLite for development and tests, PostgreSQL in production
DB_ENGINE = os.getenv("DB_ENGINE", "sqlite")

if DB_ENGINE == "postgresql":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("DB_NAME", "inventory"),
            "USER": os.getenv("DB_USER", "postgres"),
            "PASSWORD": os.getenv("DB_PASSWORD", ""),
            "HOST": os.getenv("DB_HOST", "localhost"),
            "PORT": os.getenv("DB_PORT", "5432"),
            "ATOMIC_REQUESTS": False,
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.getenv("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# Cache: local memory by default, Redis when REDIS_URL is set
REDIS_URL = os.getenv("REDIS_URL")

if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": REDIS_URL,
            "KEY_PREFIX": "inventory",
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "inventory-default",
        }
    }

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
    ],
    "DEFAULT_PAGINATION_CLASS": "core_backend.pagination.StandardPagination",
    "PAGE_SIZE": 25,
    "EXCEPTION_HANDLER": "core_backend.exceptions.api_exception_handler",
    "COERCE_DECIMAL_TO_STRING": True,
}

# Inventory domain settings
INVENTORY_LOG_LEVEL = os.getenv("INVENTORY_LOG_LEVEL", "INFO")
INVENTORY_STOCK_LEVEL_CACHE_TIMEOUT = int(os.getenv("INVENTORY_STOCK_LEVEL_CACHE_TIMEOUT", "30"))
COGS_RECIPE_COST_CACHE_TIMEOUT = int(os.getenv("COGS_RECIPE_COST_CACHE_TIMEOUT", "60"))

# Budget thresholds (percentages / ratios)
BUDGET_UNDER_UTILIZED_RATIO = os.getenv("BUDGET_UNDER_UTILIZED_RATIO", "0.10")
BUDGET_SIGNIFICANT_VARIANCE_PERCENT = os.getenv("BUDGET_SIGNIFICANT_VARIANCE_PERCENT", "10")
BUDGET_CATEGORY_OVERSPEND_PERCENT = os.getenv("BUDGET_CATEGORY_OVERSPEND_PERCENT", "15")
BUDGET_REALLOCATION_PERCENT = os.getenv("BUDGET_REALLOCATION_PERCENT", "20")
BUDGET_TREND_INCREASE_PERCENT = os.getenv("BUDGET_TREND_INCREASE_PERCENT", "20")

# Cost analytics thresholds
COST_OVERSTOCK_RATIO = os.getenv("COST_OVERSTOCK_RATIO", "1.2")
COST_SLOW_MOVING_MIN_VALUE = os.getenv("COST_SLOW_MOVING_MIN_VALUE", "100")
COST_SLOW_MOVING_MIN_USES = os.getenv("COST_SLOW_MOVING_MIN_USES", "5")
COST_SLOW_MOVING_IDLE_DAYS = os.getenv("COST_SLOW_MOVING_IDLE_DAYS", "15")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {name} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
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
        "django": {
            "handlers": ["console"],
            "level": os.getenv("DJANGO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        **{
            app: {
                "handlers": ["console"],
                "level": INVENTORY_LOG_LEVEL,
                "propagate": False,
            }
            for app in (
                "core_backend",
                "measurements",
                "materials",
                "inventory",
                "sections",
                "cogs",
                "purchasing",
                "budgets",
                "reports",
            )
        },
    },
}
