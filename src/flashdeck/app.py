"""Interactive terminal front end for the session controller."""
import logging
import shutil
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.layout import Layout
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich.text import Text

from flashdeck.classes.models import ALL_DIFFICULTY_LEVELS, CardSideContent, Deck, Flashcard
from flashdeck.classes.views import ViewMode
from flashdeck.session import SessionController

logger = logging.getLogger(__name__)

console = Console()

FRONT_PANEL_NAME = "Question"
BACK_PANEL_NAME = "Answer"


def describe_side(side: CardSideContent) -> str:
    """Text for one card side, with a marker when it carries an image."""
    parts = []
    if side.text:
        parts.append(side.text)
    if side.image_data_url:
        mime_type = side.image_data_url.split(";", 1)[0].removeprefix("data:")
        parts.append(f"[image: {mime_type}]")
    return "\n".join(parts) or "(empty)"


def average_difficulty(deck: Deck) -> Optional[float]:
    if not deck.cards:
        return None
    return sum(card.difficulty for card in deck.cards) / len(deck.cards)


def create_decks_table(decks: List[Deck]) -> Table:
    """
    Create a table listing decks with their card counts.

    Args:
        decks (List[Deck]): Decks to list, in stored order.

    Returns:
        Table: A Rich Table with one row per deck.
    """
    table = Table(title="Decks")
    table.add_column("#", style="cyan")
    table.add_column("Name", style="magenta")
    table.add_column("Description")
    table.add_column("Cards", justify="right")
    table.add_column("Avg. difficulty", justify="right")
    for i, deck in enumerate(decks):
        avg = average_difficulty(deck)
        table.add_row(str(i + 1), deck.name, deck.description or "",
                      str(len(deck.cards)), f"{avg:.1f}" if avg is not None else "-")
    return table


def create_cards_table(deck: Deck) -> Table:
    table = Table(title=f"Cards in '{deck.name}'")
    table.add_column("#", style="cyan")
    table.add_column("Front", style="magenta")
    table.add_column("Back", style="green")
    table.add_column("Difficulty", justify="right")
    for i, card in enumerate(deck.cards):
        table.add_row(str(i + 1), describe_side(card.front), describe_side(card.back), str(card.difficulty))
    return table


def display_menu(title: str, options: List[str]) -> Panel:
    """Create a panel listing the given menu options."""
    return Panel("\n".join(options), title=title, border_style="blue", expand=False)


class TerminalLayout:
    """Renders the practice screen."""

    def __init__(self) -> None:
        self.update_terminal_size()

    def update_terminal_size(self) -> None:
        self.terminal_width, self.terminal_height = shutil.get_terminal_size()

    def render_practice(self, controller: SessionController) -> None:
        """
        Render the current practice card in the terminal.

        Args:
            controller (SessionController): Controller with an active session.
        """
        self.update_terminal_size()
        practice = controller.practice
        card = controller.current_practice_card
        if card is None:
            console.print("No flashcard to display.")
            return

        question = Panel(Text(describe_side(card.front)), title=FRONT_PANEL_NAME, border_style="cyan")
        if practice.revealed:
            answer = Panel(Text(describe_side(card.back)), title=BACK_PANEL_NAME, border_style="green")
        else:
            answer = Panel("Press 'S' to show answer", title=BACK_PANEL_NAME, border_style="green")

        layout = Layout()
        layout.split_column(
            Layout(Panel(f"Card {practice.index + 1} of {len(practice.cards)}")),
            Layout(question, name="question"),
            Layout(answer, name="answer"),
        )
        layout["question"].ratio = 2
        layout["answer"].ratio = 2
        console.print(layout, height=max(12, self.terminal_height - 8))


class KeyboardHandler:
    """Maps menu keys to actions for each screen."""

    def __init__(self, app: 'FlashcardApp'):
        self.app = app
        self.key_bindings: Dict[ViewMode, Dict[str, Callable[[], Optional[bool]]]] = {
            ViewMode.NONE: {
                'N': self.app.new_deck,
                'S': self.app.select_deck,
                'D': self.app.delete_deck,
                'Q': lambda: True,
            },
            ViewMode.MENU: {
                'E': self.app.controller.go_to_edit_mode,
                'P': self.app.controller.go_to_practice_mode,
                'R': self.app.rename_deck,
                'D': self.app.delete_selected_deck,
                'B': self.app.controller.back_to_deck_list,
            },
            ViewMode.EDIT: {
                'A': self.app.add_card,
                'E': self.app.edit_card,
                'D': self.app.delete_card,
                'B': self.app.controller.back_to_deck_menu,
            },
            ViewMode.PRACTICE: {
                'S': self.app.controller.reveal,
                'R': self.app.rate_card,
                'P': self.app.restart_practice,
                'X': self.app.controller.back_to_deck_menu,
            },
        }

    def choices(self, mode: ViewMode) -> List[str]:
        return list(self.key_bindings[mode].keys())

    def handle_input(self, mode: ViewMode, choice: str) -> bool:
        """
        Run the action bound to choice on the given screen.

        Returns:
            bool: True if the user chose to quit.
        """
        action = self.key_bindings[mode].get(choice.upper())
        if action:
            return bool(action())
        return False


class FlashcardApp:
    """Interactive flashcard application."""

    MENUS = {
        ViewMode.NONE: ["New Deck (N)", "Select Deck (S)", "Delete Deck (D)", "Quit (Q)"],
        ViewMode.MENU: ["Edit Cards (E)", "Practice (P)", "Rename Deck (R)", "Delete Deck (D)", "Back (B)"],
        ViewMode.EDIT: ["Add Card (A)", "Edit Card (E)", "Delete Card (D)", "Back (B)"],
        ViewMode.PRACTICE: ["Show/Hide Answer (S)", "Rate Card (R)", "Practice Again (P)", "Exit Practice (X)"],
    }

    def __init__(self, controller: SessionController) -> None:
        self.controller = controller
        self.terminal_layout = TerminalLayout()
        self.keyboard_handler = KeyboardHandler(self)

    # Deck list

    def pick_deck(self) -> Optional[Deck]:
        decks = self.controller.decks
        if not decks:
            console.print("No decks yet.")
            return None
        number = IntPrompt.ask("Enter deck number", default=1)
        if 1 <= number <= len(decks):
            return decks[number - 1]
        console.print("Invalid deck number.")
        return None

    def new_deck(self) -> None:
        name = Prompt.ask("Deck name")
        description = Prompt.ask("Description", default="")
        if self.controller.create_deck(name, description):
            console.print("Deck created.")
        else:
            console.print("A deck needs a name.")

    def select_deck(self) -> None:
        deck = self.pick_deck()
        if deck:
            self.controller.select_deck(deck.id)

    def delete_deck(self) -> None:
        deck = self.pick_deck()
        if deck and self.controller.delete_deck(deck.id):
            console.print("Deck deleted.")

    # Deck menu

    def rename_deck(self) -> None:
        deck = self.controller.selected_deck
        if not deck:
            return
        name = Prompt.ask("New name", default=deck.name)
        description = Prompt.ask("New description", default=deck.description or "")
        self.controller.rename_deck(deck.id, name, description)

    def delete_selected_deck(self) -> None:
        deck = self.controller.selected_deck
        if deck and self.controller.delete_deck(deck.id):
            console.print("Deck deleted.")

    # Card editor

    def pick_card(self) -> Optional[Flashcard]:
        deck = self.controller.selected_deck
        if not deck or not deck.cards:
            console.print("No cards in this deck.")
            return None
        number = IntPrompt.ask("Enter card number")
        if 1 <= number <= len(deck.cards):
            return deck.cards[number - 1]
        console.print("Invalid card number.")
        return None

    def fill_card_form(self) -> None:
        """Prompt for both sides of the card form, loading images if given."""
        form = self.controller.card_form
        form.front_text = Prompt.ask("Front text", default=form.front_text)
        self.ask_image("Front", self.controller.select_front_image, self.controller.clear_front_image)
        form = self.controller.card_form
        form.back_text = Prompt.ask("Back text", default=form.back_text)
        self.ask_image("Back", self.controller.select_back_image, self.controller.clear_back_image)

    def ask_image(self, side: str, select: Callable, clear: Callable[[], None]) -> None:
        image_path = Prompt.ask(f"{side} image path ('-' to remove, empty to keep)", default="")
        if image_path == "-":
            clear()
        elif image_path:
            # The prompt is blocking anyway, so wait for the read to land in the form.
            select(image_path).result()

    def add_card(self) -> None:
        self.controller.start_create_card()
        self.fill_card_form()
        if self.controller.save_card():
            console.print("Flashcard added successfully!")
        else:
            console.print("Empty card ignored.")

    def edit_card(self) -> None:
        card = self.pick_card()
        if not card:
            return
        self.controller.start_edit_card(card.id)
        self.fill_card_form()
        if self.controller.save_card():
            console.print("Flashcard updated successfully!")
        else:
            self.controller.reset_card_form()

    def delete_card(self) -> None:
        card = self.pick_card()
        if card and self.controller.delete_card(card.id):
            console.print("Flashcard deleted successfully!")

    # Practice

    def rate_card(self) -> None:
        if not self.controller.current_practice_card:
            return
        level = IntPrompt.ask("Difficulty (1 easy - 10 hard)",
                              choices=[str(level) for level in ALL_DIFFICULTY_LEVELS])
        self.controller.rate_current_card(level)

    def restart_practice(self) -> None:
        if not self.controller.start_practice():
            console.print("This deck has no cards to practice.")

    # Rendering

    def render(self) -> None:
        mode = self.controller.view_mode
        deck = self.controller.selected_deck
        if mode == ViewMode.NONE:
            console.print(create_decks_table(self.controller.decks))
        elif mode == ViewMode.MENU and deck:
            console.print(Panel(deck.description or "", title=deck.name, style="bold magenta", expand=False))
            console.print(f"{len(deck.cards)} cards")
        elif mode == ViewMode.EDIT and deck:
            console.print(create_cards_table(deck))
        elif mode == ViewMode.PRACTICE:
            if self.controller.practice.finished:
                console.print(Panel("Practice finished!", style="bold green", expand=False))
            elif self.controller.practice.active:
                self.terminal_layout.render_practice(self.controller)
            else:
                console.print("This deck has no cards to practice.")
        console.print(display_menu("Menu", self.MENUS[mode]))

    def run(self) -> None:
        """Run the screen loop until the user quits."""
        while True:
            console.clear()
            console.print(Panel("Flashcard Study App", style="bold magenta"))
            self.render()
            mode = self.controller.view_mode
            choices = self.keyboard_handler.choices(mode)
            choice = Prompt.ask("Choose an option", choices=choices + [c.lower() for c in choices],
                                show_choices=False)
            if self.keyboard_handler.handle_input(mode, choice):
                break


def confirm_prompt(message: str) -> bool:
    return Confirm.ask(message, default=False)
