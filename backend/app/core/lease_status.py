"""
Lease lifecycle: allowed status transitions.
No update of a lease status should bypass apply_transition.
"""
from dataclasses import dataclass

DRAFT = "draft"
PENDING_SIGNATURE = "pending_signature"
FULLY_SIGNED = "fully_signed"
ACTIVE = "active"
NOTICE_GIVEN = "notice_given"
TERMINATED = "terminated"
ARCHIVED = "archived"
CANCELLED = "cancelled"

STATUSES = {
    DRAFT,
    PENDING_SIGNATURE,
    FULLY_SIGNED,
    ACTIVE,
    NOTICE_GIVEN,
    TERMINATED,
    ARCHIVED,
    CANCELLED,
}

STATUS_LABELS = {
    DRAFT: "Brouillon",
    PENDING_SIGNATURE: "En attente de signature",
    FULLY_SIGNED: "Signé",
    ACTIVE: "Actif",
    NOTICE_GIVEN: "Préavis en cours",
    TERMINATED: "Résilié",
    ARCHIVED: "Archivé",
    CANCELLED: "Annulé",
}


class LeaseTransitionError(ValueError):
    """Transition not allowed from the lease's current status."""


@dataclass(frozen=True)
class Transition:
    sources: frozenset[str]
    target: str


TRANSITIONS: dict[str, Transition] = {
    "INITIATE_SIGNATURE": Transition(frozenset({DRAFT}), PENDING_SIGNATURE),
    "MARK_FULLY_SIGNED": Transition(frozenset({PENDING_SIGNATURE}), FULLY_SIGNED),
    "ACTIVATE": Transition(frozenset({FULLY_SIGNED}), ACTIVE),
    "GIVE_NOTICE": Transition(frozenset({ACTIVE}), NOTICE_GIVEN),
    "TERMINATE": Transition(frozenset({ACTIVE, NOTICE_GIVEN}), TERMINATED),
    "ARCHIVE": Transition(frozenset({TERMINATED}), ARCHIVED),
    "CANCEL": Transition(frozenset({DRAFT, PENDING_SIGNATURE}), CANCELLED),
}


def can_transition(name: str, current_status: str) -> bool:
    transition = TRANSITIONS.get(name)
    return transition is not None and current_status in transition.sources


def apply_transition(name: str, current_status: str) -> str:
    """Return the status reached by transition `name`, or raise LeaseTransitionError."""
    transition = TRANSITIONS.get(name)
    if transition is None:
        raise LeaseTransitionError(f"Transition inconnue : {name}")
    if current_status not in transition.sources:
        raise LeaseTransitionError(
            f'Transition "{name}" impossible depuis l\'état "{current_status}". '
            f"États source valides : {', '.join(sorted(transition.sources))}"
        )
    return transition.target
