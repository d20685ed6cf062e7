"""Core domain logic for dok."""
