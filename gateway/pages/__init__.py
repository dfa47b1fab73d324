"""HTML pages rendered by the gateway (OAuth popup result pages)."""

from gateway.pages.notifier import render_error_page, render_success_page

__all__ = ["render_error_page", "render_success_page"]
