"""Small factories for institutions and sync targets."""

from kakeibo.application.dtos.sync import SyncTarget
from kakeibo.domain.sync.ports import Institution


def make_institution(
    index: int,
    institution_type: str = "bank",
    connected: bool = True,
) -> Institution:
    return Institution(
        id=f"inst-{index}",
        name=f"Institution {index}",
        type=institution_type,
        connected=connected,
    )


def make_target(index: int, institution_type: str = "bank") -> SyncTarget:
    return SyncTarget.from_institution(make_institution(index, institution_type))
