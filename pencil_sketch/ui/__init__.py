"""Qt-side helpers for driving the sketch renderer from an interactive shell."""

from .render_worker import RenderScheduler, RenderThread

__all__ = ["RenderScheduler", "RenderThread"]
