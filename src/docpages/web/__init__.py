"""
Web output helpers (redirect landing page, hosting markers).
"""

from .redirect import RedirectReport, render_redirect, write_nojekyll, write_redirect

__all__ = ["RedirectReport", "render_redirect", "write_nojekyll", "write_redirect"]
