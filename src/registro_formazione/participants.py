"""Normalise the oracle's participant list."""

from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from registro_formazione.logging import get_logger
from registro_formazione.models import Participant

log = get_logger(__name__)


def coerce_participants(items: Iterable[Any] | None) -> list[Participant]:
    """Participants from plain name strings or objects.

    Objects may carry ``nome_completo`` or ``nome`` + ``cognome``. Entries
    without any name are dropped.
    """
    if isinstance(items, (str, Mapping, Participant)):
        items = [items]
    elif not isinstance(items, (list, tuple)):
        items = []
    participants: list[Participant] = []
    for index, item in enumerate(items):
        if isinstance(item, Participant):
            participant = item
        elif isinstance(item, str):
            participant = Participant(nome_completo=item)
        elif isinstance(item, Mapping):
            try:
                participant = Participant.model_validate(dict(item))
            except ValidationError as e:
                log.warning(
                    "participant_skipped",
                    index=index,
                    reason="invalid_values",
                    error_count=e.error_count(),
                )
                continue
        else:
            log.warning("participant_skipped", index=index, reason="not_an_object")
            continue

        if not participant.display_name:
            log.warning("participant_skipped", index=index, reason="no_name")
            continue
        participants.append(participant)
    return participants
