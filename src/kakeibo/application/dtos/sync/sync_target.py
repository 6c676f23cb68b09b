"""Institution handed to the orchestrator for one sync leg."""

from dataclasses import dataclass

from kakeibo.domain.sync.ports import Institution


@dataclass(frozen=True)
class SyncTarget:
    institution_id: str
    institution_name: str
    institution_type: str

    @classmethod
    def from_institution(cls, institution: Institution) -> "SyncTarget":
        return cls(
            institution_id=institution.id,
            institution_name=institution.name,
            institution_type=institution.type,
        )
