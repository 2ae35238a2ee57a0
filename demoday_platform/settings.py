"""Django settings for demoday_platform project."""

from pathlib import Path

import environ
import structlog


# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Django-environ
# Take environment variables from .env file
env = environ.Env()
environ.Env.read_env(BASE_DIR / ".env")

# --------------------------------------------------------------------------------------------------
# GENERAL
# --------------------------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#debug
DEBUG = env.bool("DJANGO_DEBUG", False)
SITE_ID = env.int("SITE_ID", default=1)


# --------------------------------------------------------------------------------------------------
# INTERNATIONALIZATION
# https://docs.djangoproject.com/en/dev/topics/i18n/
# --------------------------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#language-code
LANGUAGE_CODE = env("LANGUAGE_CODE", default="en-us")
# http://en.wikipedia.org/wiki/List_of_tz_zones_by_name
TIME_ZONE = env("TIME_ZONE", default="UTC")
# https://docs.djangoproject.com/en/dev/ref/settings/#use-i18n
USE_I18N = env.bool("USE_I18N", default=True)
# https://docs.djangoproject.com/en/dev/ref/settings/#use-tz
USE_TZ = env.bool("USE_TZ", default=True)


# --------------------------------------------------------------------------------------------------
# DATABASES
# --------------------------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#databases
DATABASES = {"default": env.db("DATABASE_URL", default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}")}
DATABASES["default"]["ATOMIC_REQUESTS"] = True

# Default primary key field type
# https://docs.djangoproject.com/en/dev/ref/settings/#default-auto-field
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# --------------------------------------------------------------------------------------------------
# URLS
# --------------------------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#root-urlconf
ROOT_URLCONF = "demoday_platform.urls"


# --------------------------------------------------------------------------------------------------
# APPS
# --------------------------------------------------------------------------------------------------
DJANGO_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "django.contrib.sites",
]
THIRD_PARTY_APPS = [
    "django_structlog",
    "allauth",
    "allauth.account",
]
LOCAL_APPS = [
    "users",
    "teams",
    "events",
    "demodays",
]
# https://docs.djangoproject.com/en/dev/ref/settings/#installed-apps
INSTALLED_APPS = LOCAL_APPS + THIRD_PARTY_APPS + DJANGO_APPS


# --------------------------------------------------------------------------------------------------
# SECURITY
# --------------------------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#secret-key
SECRET_KEY = env("DJANGO_SECRET_KEY", default="insecure-demoday-development-key")
# https://docs.djangoproject.com/en/dev/ref/settings/#allowed-hosts
ALLOWED_HOSTS = env.list("DJANGO_ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])
# https://docs.djangoproject.com/en/dev/ref/settings/#session-cookie-httponly
SESSION_COOKIE_HTTPONLY = True
# https://docs.djangoproject.com/en/dev/ref/settings/#session-cookie-secure
SESSION_COOKIE_SECURE = env.bool("SESSION_COOKIE_SECURE", True)
# https://docs.djangoproject.com/en/dev/ref/settings/#csrf-cookie-httponly
CSRF_COOKIE_HTTPONLY = True
# https://docs.djangoproject.com/en/dev/ref/settings/#csrf-cookie-secure
CSRF_COOKIE_SECURE = env.bool("CSRF_COOKIE_SECURE", True)
# https://docs.djangoproject.com/en/dev/ref/settings/#x-frame-options
X_FRAME_OPTIONS = "DENY"


# --------------------------------------------------------------------------------------------------
# ADMIN
# --------------------------------------------------------------------------------------------------
# Django Admin URL
ADMIN_URL = env("DJANGO_ADMIN_URL", default="admin/")

# https://docs.djangoproject.com/en/dev/ref/settings/#admins
ADMIN_NAMES = env.list("ADMIN_NAMES", default=[])
ADMIN_EMAILS = env.list("ADMIN_EMAILS", default=[])
ADMINS = list(zip(ADMIN_NAMES, ADMIN_EMAILS, strict=False))

# https://docs.djangoproject.com/en/dev/ref/settings/#managers
MANAGERS = ADMINS


# --------------------------------------------------------------------------------------------------
# AUTHENTICATION
# --------------------------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#authentication-backends
AUTHENTICATION_BACKENDS = [
    "django.contrib.auth.backends.ModelBackend",
    "allauth.account.auth_backends.AuthenticationBackend",
]

# https://docs.djangoproject.com/en/dev/ref/settings/#auth-user-model
AUTH_USER_MODEL = "users.CustomUser"

# https://docs.djangoproject.com/en/dev/ref/settings/#login-url
LOGIN_URL = "/accounts/login/"

# --------------
# django-allauth
# https://docs.allauth.org/en/latest/
# --------------

# Identities sign in passwordless; sign-up is driven by demo day invitations
ACCOUNT_SIGNUP_FIELDS = ["email*"]
ACCOUNT_LOGIN_METHODS = {"email"}
ACCOUNT_EMAIL_VERIFICATION = "mandatory"
ACCOUNT_LOGIN_BY_CODE_ENABLED = True
ACCOUNT_PREVENT_ENUMERATION = True

# Hash e-mail addresses in structured logs
LOG_EMAIL_HASH = env.bool("LOG_EMAIL_HASH", default=True)


# --------------------------------------------------------------------------------------------------
# PASSWORDS
# Identities are passwordless, but the admins do have passwords
# --------------------------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#password-hashers
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.PBKDF2PasswordHasher",
    "django.contrib.auth.hashers.PBKDF2SHA1PasswordHasher",
]

# https://docs.djangoproject.com/en/dev/ref/settings/#auth-password-validators
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]


# --------------------------------------------------------------------------------------------------
# MIDDLEWARE
# --------------------------------------------------------------------------------------------------
# Order matters!
# https://docs.djangoproject.com/en/dev/ref/settings/#middleware
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "allauth.account.middleware.AccountMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "django_structlog.middlewares.RequestMiddleware",
]


# --------------------------------------------------------------------------------------------------
# STATIC
# --------------------------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#static-root
STATIC_ROOT = BASE_DIR / "staticfiles"

# https://docs.djangoproject.com/en/dev/ref/settings/#static-url
STATIC_URL = env("STATIC_URL", default="static/")


# --------------------------------------------------------------------------------------------------
# TEMPLATES
# --------------------------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#templates
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


# --------------------------------------------------------------------------------------------------
# EMAIL
# --------------------------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#email-backend
EMAIL_BACKEND = env(
    "DJANGO_EMAIL_BACKEND",
    default="django.core.mail.backends.console.EmailBackend",
)
# https://docs.djangoproject.com/en/dev/ref/settings/#default-from-email
DEFAULT_FROM_EMAIL = env("DEFAULT_FROM_EMAIL", default="demoday@localhost")
# https://docs.djangoproject.com/en/dev/ref/settings/#email-timeout
EMAIL_TIMEOUT = 5


# --------------------------------------------------------------------------------------------------
# LOGGING
# --------------------------------------------------------------------------------------------------
# https://docs.djangoproject.com/en/dev/ref/settings/#logging
# https://docs.djangoproject.com/en/dev/topics/logging

# Ensure log directory exists
log_dir = Path(env("LOG_DIR", default=BASE_DIR / "logs"))
log_dir.mkdir(parents=True, exist_ok=True)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "colored_console": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": structlog.dev.ConsoleRenderer(colors=True),
        },
        "json_formatter": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": structlog.processors.JSONRenderer(),
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "colored_console",
        },
        "json_file": {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": log_dir / "django.log",
            "formatter": "json_formatter",
            "when": "midnight",
            "backupCount": 30,
        },
        "error_file": {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "filename": log_dir / "error.log",
            "formatter": "json_formatter",
            "when": "midnight",
            "backupCount": 90,
            "level": "ERROR",
        },
    },
    "root": {
        "handlers": ["console", "json_file"],
        "level": "WARNING",
    },
    "loggers": {
        "django": {
            "handlers": ["console", "json_file"],
            "level": "WARNING",
            "propagate": False,
        },
        "django.request": {
            "handlers": ["error_file"],
            "level": "ERROR",
            "propagate": True,
        },
        "django.db.backends": {
            "level": env("DJANGO_DATABASE_LOG_LEVEL", default="ERROR"),
            "handlers": ["error_file"],
            "propagate": False,
        },
        "users": {
            "level": env("LOG_LEVEL", default="INFO"),
            "handlers": ["console", "json_file", "error_file"],
            "propagate": False,
        },
        "teams": {
            "level": env("LOG_LEVEL", default="INFO"),
            "handlers": ["console", "json_file", "error_file"],
            "propagate": False,
        },
        "events": {
            "level": env("LOG_LEVEL", default="INFO"),
            "handlers": ["console", "json_file", "error_file"],
            "propagate": False,
        },
        "demodays": {
            "level": env("LOG_LEVEL", default="INFO"),
            "handlers": ["console", "json_file", "error_file"],
            "propagate": False,
        },
    },
}

# Structlog configuration
processors = []

# Add CallsiteParameterAdder in debug mode
if DEBUG:
    processors.append(
        # Add source code location information (file, function, line) where the log was called
        structlog.processors.CallsiteParameterAdder(
            parameters=(
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ),
        ),
    )

processors.extend(
    [
        # Add context variables from the current context
        structlog.contextvars.merge_contextvars,
        # Filter logs according to their level
        structlog.stdlib.filter_by_level,
        # Add a timestamp in ISO 8601 format
        structlog.processors.TimeStamper(fmt="iso"),
        # Add the logger name
        structlog.stdlib.add_logger_name,
        # Add the log level
        structlog.stdlib.add_log_level,
        # Replace positional arguments with properly formatted strings
        structlog.stdlib.PositionalArgumentsFormatter(),
        # Add stack information for warnings and above
        structlog.processors.StackInfoRenderer(),
        # Format exception info if present
        structlog.processors.format_exc_info,
        # If some value is in bytes, decode it to unicode
        structlog.processors.UnicodeDecoder(),
        # Prepare the event dict for the formatter
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
)

structlog.configure(
    processors=processors,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


# --------------------------------------------------------------------------------------------------
# ANALYTICS
# --------------------------------------------------------------------------------------------------
# Dotted path of the analytics sink; events are dispatched after the surrounding transaction commits
ANALYTICS_SINK = env("ANALYTICS_SINK", default="demodays.analytics.LoggingAnalyticsSink")
ANALYTICS_API_URL = env("ANALYTICS_API_URL", default="")
ANALYTICS_API_KEY = env("ANALYTICS_API_KEY", default="")
ANALYTICS_TIMEOUT = env.float("ANALYTICS_TIMEOUT", default=5.0)
ANALYTICS_MAX_RETRIES = env.int("ANALYTICS_MAX_RETRIES", default=3)


# --------------------------------------------------------------------------------------------------
# DEMO DAY
# --------------------------------------------------------------------------------------------------
DEMO_DAY_PARTICIPANTS_PAGE_SIZE = env.int("DEMO_DAY_PARTICIPANTS_PAGE_SIZE", default=20)
DEMO_DAY_MAX_PAGE_SIZE = env.int("DEMO_DAY_MAX_PAGE_SIZE", default=100)
