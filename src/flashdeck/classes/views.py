from enum import Enum


class ViewMode(Enum):
    """Screens the session controller can be on.

    Values:
        NONE: No deck selected, the deck list is shown
        MENU: A deck is selected, choosing between edit and practice
        EDIT: Card list and card form of the selected deck
        PRACTICE: Active (or just finished) review of the selected deck
    """
    NONE = "none"
    MENU = "menu"
    EDIT = "edit"
    PRACTICE = "practice"
