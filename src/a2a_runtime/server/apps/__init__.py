"""HTTP application components for the A2A runtime."""

from a2a_runtime.server.apps.starlette_app import A2AStarletteApplication


__all__ = ['A2AStarletteApplication']
