"""Static blog generator with a small built-in markdown renderer."""

from blogsite.markdown import escape_html, markdown_to_html, render_inline
from blogsite.posts import Post, parse_post

__all__ = ["Post", "escape_html", "markdown_to_html", "parse_post", "render_inline"]
