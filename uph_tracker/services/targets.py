from typing import Optional, Sequence

from .records import TargetRecord


def active_target(targets: Sequence[TargetRecord]) -> Optional[TargetRecord]:
    """The flagged active target, else the first available one."""
    for t in targets:
        if t.is_active:
            return t
    return targets[0] if targets else None


def resolve_target(target_id: Optional[str], targets: Sequence[TargetRecord]) -> Optional[TargetRecord]:
    """A log's own target when it still exists, otherwise the active fallback."""
    if target_id:
        for t in targets:
            if t.id == target_id:
                return t
    return active_target(targets)


def sort_targets(targets: Sequence[TargetRecord]) -> list[TargetRecord]:
    return sorted(targets, key=lambda t: (t.target_uph, t.name))
