"""Command-line entry point for flashdeck.

Example usage:
    flashdeck study                      # Interactive study app
    flashdeck decks                      # List decks with card counts
    flashdeck --data-dir ./data decks    # Use another storage directory
"""
import functools
import logging
from pathlib import Path
from typing import Callable, Optional

import click

from flashdeck.app import FlashcardApp, confirm_prompt, console, create_decks_table
from flashdeck.classes.settings import LOG_LEVELS, Settings, load_settings
from flashdeck.session import SessionController
from flashdeck.storage import FileStorage
from flashdeck.store import FlashcardsStore

logger = logging.getLogger(__name__)


def report_errors(command: Callable) -> Callable:
    """Print unexpected errors in red and exit with status 1 instead of a traceback."""
    @functools.wraps(command)
    def wrapper(*args, **kwargs):
        try:
            return command(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except Exception as e:
            logger.error(f"Command failed: {str(e)}", exc_info=logger.isEnabledFor(logging.DEBUG))
            console.print(f"[bold red]Error: {str(e)}")
            click.get_current_context().exit(1)
    return wrapper


def build_store(settings: Settings) -> FlashcardsStore:
    """Create the single store for this process."""
    storage = FileStorage(settings.data_dir)
    return FlashcardsStore(storage, storage_key=settings.storage_key)


@click.group()
@click.option('--settings', 'settings_path', type=click.Path(dir_okay=False, path_type=Path),
              default=None, help='Path to a settings.json file.')
@click.option('--data-dir', type=click.Path(file_okay=False, path_type=Path), default=None,
              help='Directory where the flashcards state is stored.')
@click.option('--log-level', type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None,
              help='Logging level.')
@click.pass_context
def main(ctx: click.Context, settings_path: Optional[Path], data_dir: Optional[Path],
         log_level: Optional[str]) -> None:
    """Study flashcards in the terminal."""
    settings = load_settings(settings_path)
    if data_dir:
        settings.data_dir = data_dir
    if log_level:
        settings.log_level = log_level.upper()

    logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    logger.debug(f"Using data directory {settings.data_dir}")
    ctx.obj = settings


@main.command()
@click.pass_obj
@report_errors
def study(settings: Settings) -> None:
    """Open the interactive study app."""
    controller = SessionController(build_store(settings), confirm=confirm_prompt,
                                   default_difficulty=settings.default_difficulty)
    app = FlashcardApp(controller)
    try:
        app.run()
    except (KeyboardInterrupt, EOFError):
        console.print("\nGoodbye!")
    finally:
        controller.image_loader.shutdown()


@main.command()
@click.pass_obj
@report_errors
def decks(settings: Settings) -> None:
    """List all decks."""
    store = build_store(settings)
    all_decks = store.get_decks()
    if not all_decks:
        console.print("No decks yet. Run 'flashdeck study' to create one.")
        return
    console.print(create_decks_table(all_decks))


if __name__ == "__main__":
    main()
