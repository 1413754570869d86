# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets; keep them in .env (local, gitignored).
"""

ENV_VARS = {
    # App / logging
    "TODOX_APP_NAME": "App display name (default: todox).",
    "TODOX_LOG_LEVEL": "Console logging level (default: INFO).",
    # Connectors
    "TODOX_CONSOLE_ENABLED": "Run the console REPL (true/false, default: true).",
    "TODOX_NOTIFIER": "Where reminders are shown: console | matrix (default: console).",
    "TODOX_AUTO_GRANT_NOTIFICATIONS": "Skip the console permission prompt (true/false).",
    # Reminder tuning
    "TODOX_NOTIFICATION_TTL_SECONDS": "Seconds before a shown reminder is dismissed (default: 5).",
    "TODOX_URGENT_WINDOW_HOURS": "Tasks due within this many hours count as urgent (default: 24).",
    # Matrix
    "TODOX_MATRIX_HOMESERVER": "Matrix homeserver URL.",
    "TODOX_MATRIX_USER_ID": "Matrix user ID (bot).",
    "TODOX_MATRIX_PASSWORD": "Password for first login (session stored locally).",
    "TODOX_MATRIX_ROOM": "Room ID reminders are posted to.",
    # Paths (gitignored)
    "TODOX_DATA_DIR": "Local data directory (default: .local/todox).",
    "TODOX_REMINDERS_DB_PATH": "Reminder mirror SQLite path (default: <data_dir>/reminders.sqlite3).",
    "TODOX_MATRIX_STORE_PATH": "Matrix session directory (default: <data_dir>/matrix_store).",
}
