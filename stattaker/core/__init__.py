"""Core application plumbing (configuration, dependencies)."""
