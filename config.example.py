# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a
local .env file). Everything here is optional: tasklane runs with defaults.
"""

ENV_VARS = {
    # App / logging
    "TASKLANE_APP_NAME": "App display name, also used as the prompt (default: tasklane).",
    "TASKLANE_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKLANE_DATA_DIR": "Local data directory for the database and logs (default: .local/tasklane).",
    "TASKLANE_TASKS_DB_PATH": "SQLite path for tasks and manual order (default: <data_dir>/tasks.sqlite3).",
    # Task list behaviour
    "TASKLANE_SETTLE_MS": "How long a toggled task stays in the optimistic cache, in ms (default: 500).",
    "TASKLANE_DEFAULT_FILTER": "Initial filter: all | completed (done) | pending (open). Default: all.",
    "TASKLANE_DEFAULT_SORT": "Initial sort: priority | due_date (due) | alphabetical (alpha). Default: due_date.",
    "TASKLANE_MANUAL_ORDER": "Start in manual order mode (true/false, default: false).",
}
