# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real credentials. Use .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "BOUQUET_APP_NAME": "App display name (default: task-bouquet).",
    "BOUQUET_LOG_LEVEL": "Console logging level (default: INFO).",
    "BOUQUET_DATA_DIR": "Local data directory for logs and .ics exports (default: .local/bouquet).",
    # Persistence service
    "BOUQUET_API_BASE_URL": "Board API base URL (default: http://localhost:8000/api).",
    "BOUQUET_API_USERNAME": "Basic-auth user for the API gate (empty => no auth header).",
    "BOUQUET_API_PASSWORD": "Basic-auth password for the API gate.",
    "BOUQUET_HTTP_TIMEOUT_SECONDS": "Per-request timeout in seconds (default: 10).",
    # Board behavior
    "BOUQUET_REFRESH_INTERVAL_SECONDS": "Silent background refresh interval (default: 30).",
    "BOUQUET_ALERT_DAYS_THRESHOLD": "Look-ahead window in days for due-soon alerts (default: 3).",
    "BOUQUET_ALERTS_ENABLED": "POST due-date alerts to /alerts/notify (true/false, default true).",
    # Presentation
    "BOUQUET_CONSOLE_ENABLED": "Run the interactive console (true/false, default true).",
}
