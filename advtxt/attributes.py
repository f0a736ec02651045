"""Select the room attribute a command triggers and the condition that applies."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import ENTER, Attribute, AttributeType, Condition
from .parser import GET, GO


def match_attribute(
    attributes: Iterable[Attribute],
    verb: str,
    obj: str,
    *,
    go: str = GO,
    get: str = GET,
) -> Attribute | None:
    """Return the first attribute triggered by ``verb`` and ``obj``.

    Checked per attribute, in declaration order:

    - ``go <exit>`` matches an exit attribute by name or alias
    - ``get <item>`` matches a ``get`` attribute whose ``item`` is the object
    - any other verb matches a command attribute of the same name

    The ``enter`` attribute never matches here; it only runs on room entry.
    """

    verb_cf = verb.casefold()
    obj_cf = obj.casefold()
    go_cf = go.casefold()
    get_cf = get.casefold()
    for attribute in attributes:
        name_cf = attribute.name.casefold()
        if verb_cf == go_cf and attribute.type is AttributeType.EXIT and attribute.answers_to(obj_cf):
            return attribute
        if verb_cf == get_cf and name_cf == get_cf and (attribute.item or "").casefold() == obj_cf:
            return attribute
        if attribute.type is AttributeType.COMMAND and name_cf not in (get_cf, ENTER) and name_cf == verb_cf:
            return attribute
    return None


def evaluate_availability(items: set[str], conditions: Sequence[Condition]) -> Condition | None:
    """Return the first condition whose required items are all held.

    Conditions are authored from most to least specific, so the first match
    wins even if a later one requires more.  When nothing matches, the last
    condition is the fallback.
    """

    for condition in conditions:
        if condition.satisfied_by(items):
            return condition
    return conditions[-1] if conditions else None


__all__ = ["match_attribute", "evaluate_availability"]
