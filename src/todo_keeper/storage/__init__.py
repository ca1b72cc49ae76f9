"""Single-file JSON persistence with atomic replace and rolling backups."""
