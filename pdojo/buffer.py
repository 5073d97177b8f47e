"""Solution Buffer — the user's in-progress draft for the active challenge."""


class SolutionBuffer:
    """Holds the draft text and the id of the challenge it belongs to.

    No validation and no locking: there is a single writer (the editing
    surface, through the workflow) at a time.
    """

    def __init__(self) -> None:
        self._text = ""
        self._challenge_id: str | None = None

    @property
    def challenge_id(self) -> str | None:
        return self._challenge_id

    def set_text(self, text: str) -> None:
        self._text = text

    def get_text(self) -> str:
        return self._text

    def reset(self, challenge_id: str | None = None) -> None:
        """Clear the draft and bind it to a new challenge (or to none)."""
        self._text = ""
        self._challenge_id = challenge_id
