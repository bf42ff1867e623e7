"""
Presentation of step-up authentication challenges.

The presenter itself holds no state. Everything environment specific lives in
a :class:`PresentationSurface`, which callers inject; :class:`BrowserSurface`
is the stock one and drives the local web browser.
"""

from __future__ import annotations

import html
import logging
import os
import tempfile
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Protocol

from .errors import PresentationError
from .models import Challenge, ChallengeMethod

__all__ = [
    "BrowserSurface",
    "ChallengeHandle",
    "ChallengePresenter",
    "PresentationSurface",
    "render_overlay_page",
]

logger = logging.getLogger(__name__)

_OVERLAY_TEMPLATE = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<title>Payment authentication</title>
<style>
  body {{ margin: 0; }}
  .vektopay-overlay {{
    position: fixed; top: 0; left: 0; right: 0; bottom: 0;
    background: rgba(15, 23, 42, 0.75); z-index: 9999;
    display: flex; align-items: center; justify-content: center;
  }}
  .vektopay-overlay iframe {{
    width: 420px; height: 640px; border: 0; border-radius: 16px;
    background: #0f172a;
  }}
</style>
</head>
<body>
<div class="vektopay-overlay"><iframe src="{url}"></iframe></div>
</body>
</html>
"""


def render_overlay_page(url: str) -> str:
    """Return a page holding a modal overlay with ``url`` in an embedded frame."""
    return _OVERLAY_TEMPLATE.format(url=html.escape(url, quote=True))


class PresentationSurface(Protocol):
    """Something that can show a challenge URL to the payer."""

    def navigate(self, url: str) -> None:
        ...

    def mount_overlay(self, url: str) -> Callable[[], None]:
        """Show ``url`` in a modal frame and return a callable that removes it."""
        ...


@dataclass
class ChallengeHandle:
    """Returned by :meth:`ChallengePresenter.present`."""

    challenge: Challenge
    _remove: Optional[Callable[[], None]] = None
    closed: bool = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._remove is not None:
            self._remove()


class BrowserSurface:
    """
    Presents challenges through the standard :mod:`webbrowser` controller.

    A redirect opens the challenge URL directly. An iframe challenge is written
    to a temporary overlay page which is opened instead and deleted on close.
    """

    def __init__(
        self,
        controller: Optional[webbrowser.BaseBrowser] = None,
        *,
        directory: Optional[str] = None,
    ) -> None:
        self.controller = controller or webbrowser.get()
        self.directory = directory

    @classmethod
    def detect(cls) -> Optional["BrowserSurface"]:
        """Return a surface for the local browser, or ``None`` when there is none."""
        try:
            return cls(webbrowser.get())
        except webbrowser.Error:
            return None

    def navigate(self, url: str) -> None:
        if not self.controller.open(url):
            raise PresentationError(
                "open_challenge_not_supported", f"Browser refused to open {url}"
            )

    def mount_overlay(self, url: str) -> Callable[[], None]:
        fd, name = tempfile.mkstemp(prefix="vektopay-challenge-", suffix=".html", dir=self.directory)
        path = Path(name)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(render_overlay_page(url))
        try:
            self.navigate(path.as_uri())
        except PresentationError:
            path.unlink(missing_ok=True)
            raise

        def remove() -> None:
            path.unlink(missing_ok=True)

        return remove


class ChallengePresenter:
    """Shows a :class:`Challenge` on the injected surface."""

    def __init__(self, surface: Optional[PresentationSurface] = None) -> None:
        self.surface = surface

    def present(self, challenge: Challenge) -> ChallengeHandle:
        if self.surface is None:
            raise PresentationError(
                "open_challenge_not_supported",
                "No presentation surface is available in this environment",
            )

        if challenge.method is ChallengeMethod.REDIRECT:
            logger.info("Redirecting payer to challenge %s", challenge.url)
            self.surface.navigate(challenge.url)
            return ChallengeHandle(challenge=challenge)

        logger.info("Opening challenge %s in an overlay", challenge.url)
        remove = self.surface.mount_overlay(challenge.url)
        return ChallengeHandle(challenge=challenge, _remove=remove)
