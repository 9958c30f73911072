# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Use .env (local, gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKHUB_APP_NAME": "App display name (default: taskhub).",
    "TASKHUB_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Identity
    "TASKHUB_USER_ID": "User id the console acts as (default: local).",
    # Paths (gitignored)
    "TASKHUB_DATA_DIR": "Local data directory (default: .local/taskhub).",
    "TASKHUB_DB_PATH": "SQLite database path (default: <data_dir>/taskhub.sqlite3).",
    "TASKHUB_DB_TIMEOUT": "SQLite busy timeout in seconds (default: 30).",
    # Hierarchy defaults
    "TASKHUB_DEFAULT_COLOR": "Theme color for new groups/projects (default: #6C5DD3).",
    "TASKHUB_DEFAULT_GROUP_NAME": "Name for an auto-provisioned group when none can be derived.",
    "TASKHUB_DEFAULT_GROUP_ICON": "Icon for an auto-provisioned group when the project has no logo.",
}
