"""Turn context: bounded history windows and guest-name joining for prompts."""

from collections.abc import Sequence

# Number of transcript entries a guest or the host sees during a round
ROUND_CONTEXT_WINDOW = 4
# Number of transcript entries the host sees when concluding
CONCLUSION_CONTEXT_WINDOW = 6


def build_context(history: Sequence[str], window: int) -> str:
    """Return the last ``window`` transcript texts joined by a blank line.

    History entries are the sanitized texts of the current run, without
    speaker labels. Shorter histories yield all entries.
    """
    if window <= 0:
        return ""
    return "\n\n".join(history[-window:])


def join_names(names: Sequence[str]) -> str:
    """Join names for speech: "A", "A and B", "A, B and C"."""
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + " and " + names[-1]
