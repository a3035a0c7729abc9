"""
Error taxonomy for PrinSp.

Every failure that crosses an external boundary (capture, clipboard, file
save, OCR, global shortcut registration) is raised as one of these types.
They are boundary-local: none of them may leave the Selection, the
annotation list or the History in a modified state.
"""


class PrinSpError(Exception):
    """Base class for all PrinSp boundary failures."""


class CaptureFailure(PrinSpError):
    """The screen could not be captured."""


class ClipboardFailure(PrinSpError):
    """An image or text could not be written to the system clipboard."""


class SaveFailure(PrinSpError):
    """The composite could not be written to the chosen file."""


class OcrFailure(PrinSpError):
    """Text recognition failed or the OCR engine is unavailable."""


class ShortcutRegistrationFailure(PrinSpError):
    """The global shortcut string could not be parsed or bound."""

    def __init__(self, shortcut: str, reason: str) -> None:
        super().__init__(f"Could not register shortcut '{shortcut}': {reason}")
        self.shortcut = shortcut
        self.reason = reason
