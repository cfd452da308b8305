"""Digest generation and email delivery."""

from .generator import render_weekly_digest, render_text
from .sender import send_digest, get_transport

__all__ = ["render_weekly_digest", "render_text", "send_digest", "get_transport"]
