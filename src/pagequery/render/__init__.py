"""Report renderers (outline text, JSON)."""

from pagequery.render.base import Renderer, proper_case, render_empty, renderer_for, shorten
from pagequery.render.json import JsonRenderer
from pagequery.render.outline import OutlineRenderer

__all__ = [
    "JsonRenderer",
    "OutlineRenderer",
    "Renderer",
    "proper_case",
    "render_empty",
    "renderer_for",
    "shorten",
]
