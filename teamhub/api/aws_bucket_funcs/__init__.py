"""Object storage helpers for chat images."""
