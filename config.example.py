# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use .env (local, gitignored) for machine-specific values.

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASK_SPANNER_APP_NAME": "App display name (default: task-spanner).",
    "TASK_SPANNER_LOG_LEVEL": "Console logging level (default: INFO).",
    # Storage selection
    "TASK_SPANNER_STORAGE": "Backend: kv | file | remote (default: kv; 'userdefaults' is read as kv).",
    # Paths (gitignored)
    "TASK_SPANNER_DATA_DIR": "Local data directory (default: .local/task-spanner).",
    "TASK_SPANNER_KV_DB_PATH": "Key-value SQLite path (default: <data_dir>/tasks.sqlite3).",
    "TASK_SPANNER_TASKS_FILE": "JSON snapshot file path (default: <data_dir>/tasks.json).",
    # Remote task server
    "TASK_SPANNER_REMOTE_BASE_URL": "Task server base URL (default: http://localhost:7021).",
    "TASK_SPANNER_REMOTE_TIMEOUT_SECONDS": "Per-request timeout in seconds (default: 10, min 0.5).",
    # Startup view
    "TASK_SPANNER_MODE": "Visible mode at startup: work | life (empty => all tasks).",
}
