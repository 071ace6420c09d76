"""SQLite persistence for session documents."""
