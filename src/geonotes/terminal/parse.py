# SPDX-License-Identifier: MIT

import typer

from geonotes.model.note import NoteId
from geonotes.repository.note import NoteStore


def resolve_note_id(store: NoteStore, id_param: str) -> NoteId:
    """
    Resolve a full note id or a unique prefix of one.

    Raises:
        typer.BadParameter: If nothing or more than one note matches
    """
    id_param = id_param.strip()
    if store.get_note_by_id(id_param) is not None:
        return id_param

    matches = store.find_ids_by_prefix(id_param) if id_param else []
    if len(matches) == 0:
        raise typer.BadParameter(f"No note matches '{id_param}'")
    if len(matches) > 1:
        raise typer.BadParameter(
            f"'{id_param}' is ambiguous, it matches {len(matches)} notes"
        )
    return matches[0]
