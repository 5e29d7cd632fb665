from pathlib import Path
import os
from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "insecure-dev-key")
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = ["*"]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "submissions",
    "points",
]

DB_ENGINE = os.getenv("DB_ENGINE", "sqlite")

if DB_ENGINE == "mysql":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.mysql",
            "NAME": os.getenv("MYSQL_DATABASE", "your_db_name"),
            "USER": os.getenv("MYSQL_USER", "your_db_user"),
            "PASSWORD": os.getenv("MYSQL_PASSWORD", "your_db_password"),
            "HOST": os.getenv("MYSQL_HOST", "127.0.0.1"),
            "PORT": os.getenv("MYSQL_PORT", "3306"),
            "OPTIONS": {
                "charset": "utf8mb4",
                "use_unicode": True,
                "init_command": "SET sql_mode='STRICT_TRANS_TABLES'",
            },
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": os.getenv("SQLITE_PATH", str(BASE_DIR / "db.sqlite3")),
        }
    }

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# --- Points engine ---
POINTS = {
    "LEDGER_ENABLED": os.getenv("POINTS_LEDGER_ENABLED", "1") == "1",
    "SPENDABLE_TYPE": "spendable",
    "CUMULATIVE_TYPE": "cumulative",
    "REGISTERED_TYPES": ["spendable", "cumulative"],
    # "full" claws back the whole amount from the leaderboard track, "clamp" stops at 0
    "CUMULATIVE_REVOKE_POLICY": os.getenv("POINTS_CUMULATIVE_REVOKE_POLICY", "full"),
    "MAX_POINTS": int(os.getenv("POINTS_MAX_POINTS", "100000")),
    "CATEGORIES": {
        "realization": {
            "display_name": "Realization",
            "reference": "approval_of_realization",
            "provider": "points.providers.FixedPointsProvider",
            "options": {"default": 2500},
        },
        "invoice": {
            "display_name": "Invoice",
            "reference": "approval_of_invoice",
            "provider": "points.providers.DivisorPointsProvider",
            "options": {"field": "invoice_value", "divisor": 10},
        },
    },
}

# Validators run before a submission is allowed into "publish"
SUBMISSIONS_PUBLISH_VALIDATORS = [
    "submissions.validators.validate_owner_active",
    "submissions.validators.validate_invoice_value",
]

# --- Logging ---
POINTS_LOG_LEVEL = os.getenv("POINTS_LOG_LEVEL", "INFO")
POINTS_LOG_FILE = os.getenv("POINTS_LOG_FILE", "")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {"format": "[{asctime}] {levelname} {name}: {message}", "style": "{"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "verbose"},
    },
    "loggers": {
        "points": {"handlers": ["console"], "level": POINTS_LOG_LEVEL, "propagate": False},
        "submissions": {"handlers": ["console"], "level": POINTS_LOG_LEVEL, "propagate": False},
    },
}

if POINTS_LOG_FILE:
    LOGGING["handlers"]["points_file"] = {
        "class": "logging.FileHandler",
        "filename": POINTS_LOG_FILE,
        "formatter": "verbose",
    }
    LOGGING["loggers"]["points"]["handlers"].append("points_file")
