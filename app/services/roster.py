"""
Companion roster synchronization
"""

from typing import Iterable, List, Optional

from app.schemas.guest import Companion


def companion_slot_count(allowed_guests: int) -> int:
    """Companion slots for an invitation; the primary guest is not one."""
    return max(0, allowed_guests - 1)


def sync_companions(
    companions: Optional[Iterable[Companion]],
    allowed_guests: int,
) -> List[Companion]:
    """
    Resize a companion list to match the invitation's headcount.

    Extra entries are dropped from the tail and missing ones are appended
    blank. Entries that stay keep whatever the guest or admin typed.
    """
    slots = companion_slot_count(allowed_guests)
    current = [
        c if isinstance(c, Companion) else Companion.model_validate(c)
        for c in (companions or [])
    ]
    if len(current) >= slots:
        return current[:slots]
    return current + [Companion() for _ in range(slots - len(current))]


def missing_companion_names(companions: Iterable[Companion]) -> int:
    """Count slots whose name is blank after trimming."""
    return sum(1 for c in companions if not c.name.strip())
