# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Use:
- .env (local, gitignored)
- config_local.py (local safe overrides, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "BACKLIST_APP_NAME": "App display name (default: backlist).",
    "BACKLIST_LOG_LEVEL": "Console logging level (default: INFO).",
    # Connectors
    "BACKLIST_CONSOLE_ENABLED": "Enable the console prompt (true/false).",
    # Paths (gitignored)
    "BACKLIST_DATA_DIR": "Local data directory (default: .local/backlist).",
    "BACKLIST_DB_PATH": "SQLite database path (default: <data_dir>/backlist.sqlite3).",
    # Selection / allowance
    "BACKLIST_SHORTLIST_SIZE": "How many tasks /todo offers at once (default: 5).",
    "BACKLIST_TARGET_ALLOWANCE": "Target monthly allowance used to seed a new database (default: 400).",
    "BACKLIST_MAXIMUM_ALLOWANCE": "Maximum monthly allowance used to seed a new database (default: 600).",
}
