"""Event check-in and huddy gifting service."""
