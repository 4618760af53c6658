from typing import final

from PySide6.QtCore import QObject, Signal, Slot

from linernotes.core.models import TrackIdentity, TrackSnapshot


def resolve_identity(snapshot: TrackSnapshot | None) -> TrackIdentity | None:
    """
    Derives the key enrichment is tied to. Only title and artist take part, so
    pausing the player or a different album tag never changes it.
    """

    if snapshot is None:
        return None
    return TrackIdentity(title=snapshot.title, artist=snapshot.artist)


@final
class IdentityResolver(QObject):
    """Publishes the identity of every snapshot it is handed, changed or not."""

    identity_resolved = Signal(object, object)  # TrackIdentity | None, TrackSnapshot | None

    @Slot(object)  # pyright: ignore[reportArgumentType]
    def publish(self, snapshot: TrackSnapshot | None):
        self.identity_resolved.emit(resolve_identity(snapshot), snapshot)
