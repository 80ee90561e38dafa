"""chatline: chat session reconciliation service."""
