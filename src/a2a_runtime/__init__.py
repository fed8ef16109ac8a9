"""A2A task protocol server runtime."""
