"""
Generate the landing page that forwards visitors from the docs root into the crate docs.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable
from urllib.parse import urlsplit

from ..util import ensure_directory, write_text_file

logger = logging.getLogger(__name__)

REDIRECT_FILENAME = "index.html"
NOJEKYLL_FILENAME = ".nojekyll"

REDIRECT_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta http-equiv="refresh" content="0; url='{target}'" />
    <link rel="canonical" href="{target}">
    <title>Redirecting&hellip;</title>
  </head>
  <body>
    <p>Redirecting to <a href="{target}">{target}</a>&hellip;</p>
  </body>
</html>
"""


@dataclass
class RedirectReport:
    """
    Stores what happened when the redirect page was written.

    Attributes:
        path: The written index.html.
        target: Relative URL the page forwards to.
        target_exists: Whether the target resolves to a file in the docs tree.
    """
    path: Path
    target: str
    target_exists: bool

    def summary_rows(self) -> Iterable[tuple[str, str]]:
        yield ("Redirect page", str(self.path))
        yield ("Target", self.target)
        yield ("Target present", "yes" if self.target_exists else "no")


def render_redirect(target: str) -> str:
    """Return the redirect document for a relative URL."""
    return REDIRECT_TEMPLATE.format(target=html.escape(target, quote=True))


def resolve_target_file(docs_root: Path, target: str) -> Path:
    """Map a relative redirect URL to the file it points at inside docs_root."""
    path = urlsplit(target).path
    if not path or path.endswith("/"):
        path = f"{path}index.html"
    return (docs_root / path).resolve()


def write_redirect(docs_root: Path, target: str) -> RedirectReport:
    """
    Write `<docs_root>/index.html`, replacing any previous file.

    Args:
        docs_root: Published documentation directory.
        target: Relative URL to forward to (e.g. `./acid/index.html`).

    Returns:
        A RedirectReport; a missing target only logs a warning because the
        generator may legitimately name the crate page differently.
    """
    destination = docs_root / REDIRECT_FILENAME
    write_text_file(destination, render_redirect(target))
    target_file = resolve_target_file(docs_root, target)
    exists = target_file.is_file()
    if not exists:
        logger.warning("Redirect target %s does not exist in %s", target, docs_root)
    logger.info("Wrote redirect %s -> %s", destination, target)
    return RedirectReport(path=destination, target=target, target_exists=exists)


def write_nojekyll(docs_root: Path) -> Path:
    """Drop the marker that stops GitHub Pages from hiding underscore-prefixed files."""
    marker = ensure_directory(docs_root) / NOJEKYLL_FILENAME
    marker.touch()
    logger.info("Wrote %s", marker)
    return marker
