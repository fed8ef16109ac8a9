"""Server-side components of the A2A runtime."""
