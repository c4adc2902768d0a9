"""An arrow-key driven single-select picker for the terminal."""

__version__ = "0.1.0"

from termdrop.loop import Outcome, Phase, PickerText
from termdrop.session import PickerSession, launch

__all__ = ["Outcome", "Phase", "PickerSession", "PickerText", "launch", "__version__"]
