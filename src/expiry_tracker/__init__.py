"""Food expiry tracker service."""
