"""Clean speaker-label artifacts and wrapping quotes out of raw model output."""

_GENERIC_LABELS = ("Me:", "I:")


def sanitize(text: str, speaker_name: str) -> str:
    """Strip a leading speaker label and a single pair of wrapping quotes.

    Labels are checked case-insensitively in priority order:
    ``"{speaker_name}:"``, ``"Me:"``, ``"I:"``. Only the first match is removed.
    Empty or whitespace-only input is returned unchanged.
    """
    if not text or not text.strip():
        return text

    cleaned = text.strip()

    for label in (f"{speaker_name}:", *_GENERIC_LABELS):
        if cleaned.lower().startswith(label.lower()):
            cleaned = cleaned[len(label):].strip()
            break

    if len(cleaned) > 2 and cleaned.startswith('"') and cleaned.endswith('"'):
        cleaned = cleaned[1:-1].strip()

    return cleaned
