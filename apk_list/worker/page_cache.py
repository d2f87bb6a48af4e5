"""Shared cache holding the last successfully built page."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from apk_list.render.page_builder import PLACEHOLDER_PAGE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageSnapshot:
    """One immutable rendered page."""

    body: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    placeholder: bool = False

    @classmethod
    def initial(cls) -> "PageSnapshot":
        """Page served before the first successful refresh."""
        return cls(body=PLACEHOLDER_PAGE, placeholder=True)


class PageCache:
    """
    Holds the current page snapshot.

    Publishing replaces the reference to a fully built, frozen snapshot in a
    single assignment; readers take whatever reference is current. There is
    no lock, so a reader never waits on a refresh and can never observe a
    partially written page.
    """

    def __init__(self, initial: Optional[PageSnapshot] = None):
        self._snapshot = initial or PageSnapshot.initial()

    def read(self) -> PageSnapshot:
        """Return the most recently published snapshot."""
        return self._snapshot

    def publish(self, snapshot: PageSnapshot) -> None:
        """Replace the current snapshot."""
        self._snapshot = snapshot
        logger.debug(
            f"Published page snapshot ({len(snapshot.body)} chars, "
            f"created {snapshot.created_at.isoformat()})"
        )

    @property
    def last_updated(self) -> Optional[datetime]:
        snapshot = self._snapshot
        return None if snapshot.placeholder else snapshot.created_at
