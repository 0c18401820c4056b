"""Visual QA helpers."""

from .lasso_preview import render_lasso_preview

__all__ = ["render_lasso_preview"]
