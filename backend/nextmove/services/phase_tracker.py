"""Phase tracker: campaign phase order, progress percentages, roadmap checkmarks.

Phase order: onboarding → landingpage → ads → whatsapp → webinar.

Pure functions over plain strings and lists; nothing here touches the
database. Every function is total: an unrecognized phase string is treated
as the first phase, and returned phase names are always canonical
(lower-case members of PHASE_ORDER).
"""

import enum
from collections.abc import Iterable


class Phase(str, enum.Enum):
    onboarding = "onboarding"
    landingpage = "landingpage"
    ads = "ads"
    whatsapp = "whatsapp"
    webinar = "webinar"


PHASE_ORDER: list[str] = [p.value for p in Phase]

# Progress shown once onboarding is completed
PHASE_PROGRESS: dict[str, int] = {
    Phase.onboarding.value: 20,
    Phase.landingpage.value: 40,
    Phase.ads.value: 60,
    Phase.whatsapp.value: 80,
    Phase.webinar.value: 100,
}

DEFAULT_PROGRESS = 20

# Completing this phase unlocks any progress at all
ONBOARDING_PHASE = Phase.onboarding.value

ROADMAP_STEPS: list[dict] = [
    {
        "id": 1,
        "phase": Phase.onboarding.value,
        "title": "Onboarding & Checkliste",
        "description": "Erste Schritte und Grundeinstellung",
    },
    {
        "id": 2,
        "phase": Phase.landingpage.value,
        "title": "Landingpage",
        "description": "Erstellung und Optimierung der Landingpage",
    },
    {
        "id": 3,
        "phase": Phase.ads.value,
        "title": "Werbeanzeigen",
        "description": "Einrichtung und Aktivierung von Werbekampagnen",
    },
    {
        "id": 4,
        "phase": Phase.whatsapp.value,
        "title": "WhatsApp-Bot",
        "description": "Integration der WhatsApp-Kommunikation",
    },
    {
        "id": 5,
        "phase": Phase.webinar.value,
        "title": "Webinar",
        "description": "Abschließendes Training und Schulung",
    },
]


def canonical_phase(phase: str | None) -> str:
    """Lower-case known phase name, or the first phase for anything else."""
    key = (phase or "").strip().lower()
    return key if key in PHASE_PROGRESS else PHASE_ORDER[0]


def _index(phase: str | None) -> int:
    return PHASE_ORDER.index(canonical_phase(phase))


def phase_rank(phase: str | None) -> int:
    """1-based position in PHASE_ORDER; unknown phases rank 1."""
    return _index(phase) + 1


def progress_for_phase(phase: str | None, completed_phases: Iterable[str]) -> int:
    """Progress percentage for a phase.

    Always 0 until onboarding is in completed_phases, regardless of phase.
    Unrecognized phases count as DEFAULT_PROGRESS once onboarding is done.
    """
    if ONBOARDING_PHASE not in set(completed_phases or ()):
        return 0
    return PHASE_PROGRESS.get((phase or "").strip().lower(), DEFAULT_PROGRESS)


def is_step_completed(
    step_id: int,
    current_phase: str | None,
    completed_phases: Iterable[str],
) -> bool:
    """Whether a roadmap step gets its checkmark.

    Step 1 (onboarding & checklist) depends only on completed_phases; steps
    2-5 are done once the current phase has reached them. Ids outside the
    roadmap are never completed.
    """
    if not 1 <= step_id <= len(PHASE_ORDER):
        return False
    if step_id == 1:
        return ONBOARDING_PHASE in set(completed_phases or ())
    return step_id <= phase_rank(current_phase)


def next_phase(phase: str | None) -> str:
    """Successor phase; the last phase is its own successor."""
    idx = _index(phase)
    return PHASE_ORDER[min(idx + 1, len(PHASE_ORDER) - 1)]


def previous_phase(phase: str | None) -> str:
    """Predecessor phase; the first phase is its own predecessor."""
    idx = _index(phase)
    return PHASE_ORDER[max(idx - 1, 0)]


def all_prior_phases(phase: str | None) -> list[str]:
    """Every phase strictly before phase, in order."""
    return PHASE_ORDER[: _index(phase)]


def phases_through(phase: str | None) -> list[str]:
    """Every phase up to and including phase, in order."""
    return PHASE_ORDER[: _index(phase) + 1]


def completed_through(phases: Iterable[str]) -> list[str]:
    """Longest prefix of PHASE_ORDER whose phases all appear in phases.

    Turns any stored list (unordered, duplicated, with gaps or unknown
    names) into a gap-free ordered list.
    """
    present = {(p or "").strip().lower() for p in phases or ()}
    result: list[str] = []
    for phase in PHASE_ORDER:
        if phase not in present:
            break
        result.append(phase)
    return result


def derive_state(completed_phases: Iterable[str]) -> tuple[str, int]:
    """(current_phase, progress) implied by a completed-phase list."""
    completed = completed_through(completed_phases)
    current = completed[-1] if completed else PHASE_ORDER[0]
    return current, progress_for_phase(current, completed)


def roadmap(current_phase: str | None, completed_phases: Iterable[str]) -> list[dict]:
    """ROADMAP_STEPS with a completed flag per step."""
    completed = list(completed_phases or ())
    return [
        {**step, "completed": is_step_completed(step["id"], current_phase, completed)}
        for step in ROADMAP_STEPS
    ]
