import random
import unittest
from collections import Counter

from flashdeck.classes.models import CardSideContent
from flashdeck.classes.views import ViewMode
from flashdeck.session import CardForm, SessionController, shuffle
from flashdeck.storage import MemoryStorage
from flashdeck.store import FlashcardsStore

from support import TickingClock


class RecordingConfirm:
    def __init__(self, answer=True):
        self.answer = answer
        self.messages = []

    def __call__(self, message):
        self.messages.append(message)
        return self.answer


class ImmediateLoader:
    """Image loader that delivers a fixed data URL right away."""

    def __init__(self, data_url="data:image/png;base64,AA=="):
        self.data_url = data_url
        self.paths = []

    def load(self, image_path, on_loaded):
        self.paths.append(image_path)
        on_loaded(self.data_url)


def side(text):
    return CardSideContent(text=text)


class SessionTestCase(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryStorage()
        self.store = FlashcardsStore(self.storage, clock=TickingClock())
        self.confirm = RecordingConfirm()
        self.controller = SessionController(self.store, confirm=self.confirm,
                                            image_loader=ImmediateLoader(), rng=random.Random(7))

    def make_deck(self, name="Spanish", cards=()):
        deck = self.store.create_deck(name)
        for front, back in cards:
            self.store.create_card(deck.id, side(front), side(back))
        self.controller.refresh()
        return deck


class TestNavigation(SessionTestCase):
    def test_initial_state(self):
        self.assertEqual(self.controller.view_mode, ViewMode.NONE)
        self.assertIsNone(self.controller.selected_deck)

    def test_select_and_navigate(self):
        deck = self.make_deck(cards=[("hola", "hello")])
        self.controller.select_deck(deck.id)
        self.assertEqual(self.controller.view_mode, ViewMode.MENU)
        self.assertEqual(self.controller.selected_deck.id, deck.id)

        self.controller.go_to_edit_mode()
        self.assertEqual(self.controller.view_mode, ViewMode.EDIT)
        self.controller.back_to_deck_menu()
        self.assertEqual(self.controller.view_mode, ViewMode.MENU)

        self.controller.go_to_practice_mode()
        self.assertEqual(self.controller.view_mode, ViewMode.PRACTICE)
        self.assertTrue(self.controller.practice.active)
        self.controller.back_to_deck_menu()
        self.assertEqual(self.controller.view_mode, ViewMode.MENU)
        self.assertFalse(self.controller.practice.active)

        self.controller.back_to_deck_list()
        self.assertEqual(self.controller.view_mode, ViewMode.NONE)
        self.assertIsNone(self.controller.selected_deck_id)

    def test_select_unknown_deck_is_ignored(self):
        self.controller.select_deck("missing")
        self.assertEqual(self.controller.view_mode, ViewMode.NONE)

    def test_modes_need_a_selected_deck(self):
        self.controller.go_to_edit_mode()
        self.controller.go_to_practice_mode()
        self.assertEqual(self.controller.view_mode, ViewMode.NONE)

    def test_refresh_drops_vanished_selection(self):
        deck = self.make_deck()
        self.controller.select_deck(deck.id)
        self.store.delete_deck(deck.id)
        self.controller.refresh()
        self.assertIsNone(self.controller.selected_deck_id)
        self.assertEqual(self.controller.view_mode, ViewMode.NONE)


class TestDecks(SessionTestCase):
    def test_create_deck_ignores_blank_name(self):
        self.assertIsNone(self.controller.create_deck("   ", "desc"))
        self.assertEqual(self.controller.decks, [])

    def test_create_deck_refreshes(self):
        deck = self.controller.create_deck(" Spanish ", "")
        self.assertEqual([d.name for d in self.controller.decks], ["Spanish"])
        self.assertIsNone(deck.description)

    def test_rename_deck(self):
        deck = self.make_deck()
        self.controller.rename_deck(deck.id, "Espanol", "basics")
        self.assertEqual(self.controller.decks[0].name, "Espanol")
        self.assertEqual(self.controller.decks[0].description, "basics")

    def test_delete_deck_needs_confirmation(self):
        deck = self.make_deck()
        self.controller.select_deck(deck.id)
        self.confirm.answer = False
        self.assertFalse(self.controller.delete_deck(deck.id))
        self.assertEqual(len(self.store.get_decks()), 1)
        self.assertEqual(self.controller.view_mode, ViewMode.MENU)
        self.assertEqual(self.confirm.messages, ['Really delete deck "Spanish"?'])

    def test_delete_deck_confirmed(self):
        deck = self.make_deck(cards=[("hola", "hello")])
        self.controller.select_deck(deck.id)
        self.assertTrue(self.controller.delete_deck(deck.id))
        self.assertEqual(self.store.get_decks(), [])
        self.assertEqual(self.controller.view_mode, ViewMode.NONE)


class TestCardForm(SessionTestCase):
    def setUp(self):
        super().setUp()
        self.deck = self.make_deck()
        self.controller.select_deck(self.deck.id)
        self.controller.go_to_edit_mode()

    def test_save_new_card(self):
        self.controller.card_form.front_text = "  hello  "
        self.controller.card_form.back_text = "hola"
        card = self.controller.save_card()
        self.assertEqual(card.front.text, "hello")
        self.assertEqual(card.difficulty, 5)
        self.assertEqual(len(self.controller.selected_deck.cards), 1)
        self.assertEqual(self.controller.card_form, CardForm())

    def test_empty_card_is_ignored(self):
        self.controller.card_form.front_text = "   "
        self.controller.card_form.back_text = ""
        self.controller.card_form.front_image = ""
        self.assertIsNone(self.controller.save_card())
        self.assertEqual(self.store.get_deck_by_id(self.deck.id).cards, [])

    def test_image_only_card_is_saved(self):
        self.controller.select_front_image("cat.png")
        self.assertEqual(self.controller.card_form.front_image, "data:image/png;base64,AA==")
        card = self.controller.save_card()
        self.assertEqual(card.front.text, "")
        self.assertEqual(card.front.image_data_url, "data:image/png;base64,AA==")

    def test_clear_images(self):
        self.controller.select_front_image("a.png")
        self.controller.select_back_image("b.png")
        self.controller.clear_front_image()
        self.controller.clear_back_image()
        self.assertIsNone(self.controller.card_form.front_image)
        self.assertIsNone(self.controller.card_form.back_image)

    def test_edit_card(self):
        card = self.store.create_card(self.deck.id, side("hola"), side("hello"))
        self.controller.refresh()
        self.controller.start_edit_card(card.id)
        self.assertEqual(self.controller.card_form.editing_card_id, card.id)
        self.assertEqual(self.controller.card_form.front_text, "hola")
        self.controller.card_form.back_text = " hi "
        saved = self.controller.save_card()
        self.assertEqual(saved.id, card.id)
        self.assertEqual(self.store.get_deck_by_id(self.deck.id).cards[0].back.text, "hi")
        self.assertEqual(len(self.store.get_deck_by_id(self.deck.id).cards), 1)

    def test_cancel_resets_form(self):
        card = self.store.create_card(self.deck.id, side("hola"), side("hello"))
        self.controller.refresh()
        self.controller.start_edit_card(card.id)
        self.controller.reset_card_form()
        self.assertIsNone(self.controller.card_form.editing_card_id)
        self.assertEqual(self.controller.card_form.front_text, "")

    def test_delete_card_confirmation(self):
        card = self.store.create_card(self.deck.id, side("hola"), side("hello"))
        self.controller.refresh()
        self.confirm.answer = False
        self.assertFalse(self.controller.delete_card(card.id))
        self.assertEqual(len(self.controller.selected_deck.cards), 1)
        self.confirm.answer = True
        self.assertTrue(self.controller.delete_card(card.id))
        self.assertEqual(self.controller.selected_deck.cards, [])


class TestPractice(SessionTestCase):
    def test_start_refused_for_empty_deck(self):
        deck = self.make_deck()
        self.controller.select_deck(deck.id)
        self.assertFalse(self.controller.start_practice())
        self.assertFalse(self.controller.practice.active)
        self.assertEqual(self.controller.practice.cards, [])

    def test_shuffle_is_a_permutation(self):
        deck = self.make_deck(cards=[("A", "a"), ("B", "b"), ("C", "c")])
        self.controller.select_deck(deck.id)
        for _ in range(20):
            self.controller.start_practice()
            fronts = [card.front.text for card in self.controller.practice.cards]
            self.assertEqual(sorted(fronts), ["A", "B", "C"])

    def test_shuffle_is_uniform(self):
        rng = random.Random(1234)
        trials = 6000
        counts = Counter(tuple(shuffle(["A", "B", "C"], rng)) for _ in range(trials))
        self.assertEqual(len(counts), 6)
        for count in counts.values():
            self.assertAlmostEqual(count / trials, 1 / 6, delta=0.03)

    def test_practice_does_not_reorder_deck(self):
        deck = self.make_deck(cards=[(str(i), str(i)) for i in range(10)])
        self.controller.select_deck(deck.id)
        self.controller.start_practice()
        stored = [c.front.text for c in self.store.get_deck_by_id(deck.id).cards]
        self.assertEqual(stored, [str(i) for i in range(10)])

    def test_reveal_toggles(self):
        deck = self.make_deck(cards=[("hola", "hello")])
        self.controller.select_deck(deck.id)
        self.controller.reveal()
        self.assertFalse(self.controller.practice.revealed)
        self.controller.start_practice()
        self.controller.reveal()
        self.assertTrue(self.controller.practice.revealed)
        self.controller.reveal()
        self.assertFalse(self.controller.practice.revealed)

    def test_session_finishes_after_last_rating(self):
        deck = self.make_deck(cards=[("uno", "one"), ("dos", "two")])
        self.controller.select_deck(deck.id)
        self.controller.go_to_practice_mode()
        self.controller.reveal()

        self.controller.rate_current_card(3)
        self.assertFalse(self.controller.practice.finished)
        self.assertTrue(self.controller.practice.active)
        self.assertEqual(self.controller.practice.index, 1)
        self.assertFalse(self.controller.practice.revealed)

        self.controller.rate_current_card(9)
        self.assertTrue(self.controller.practice.finished)
        self.assertFalse(self.controller.practice.active)
        self.assertIsNone(self.controller.current_practice_card)

        self.controller.reveal()
        self.assertFalse(self.controller.practice.revealed)

    def test_out_of_range_rating_is_ignored(self):
        deck = self.make_deck(cards=[("hola", "hello")])
        self.controller.select_deck(deck.id)
        self.controller.start_practice()
        for level in (0, 11):
            self.assertIsNone(self.controller.rate_current_card(level))
        self.assertEqual(self.controller.practice.index, 0)
        self.assertTrue(self.controller.practice.active)
        self.assertEqual(self.store.get_deck_by_id(deck.id).cards[0].difficulty, 5)

    def test_exit_clears_session(self):
        deck = self.make_deck(cards=[("hola", "hello"), ("adios", "bye")])
        self.controller.select_deck(deck.id)
        self.controller.start_practice()
        self.controller.reveal()
        self.controller.rate_current_card(4)
        self.controller.exit_practice()
        practice = self.controller.practice
        self.assertEqual((practice.cards, practice.index, practice.revealed, practice.finished, practice.active),
                         ([], 0, False, False, False))

    def test_end_to_end(self):
        deck = self.controller.create_deck("Spanish")
        self.controller.select_deck(deck.id)
        self.controller.go_to_edit_mode()
        self.controller.card_form.front_text = "hola"
        self.controller.card_form.back_text = "hello"
        card = self.controller.save_card()
        self.assertEqual(card.difficulty, 5)

        self.controller.back_to_deck_menu()
        self.controller.go_to_practice_mode()
        self.controller.reveal()
        self.controller.rate_current_card(8)
        self.assertTrue(self.controller.practice.finished)
        self.assertFalse(self.controller.practice.active)

        reloaded = FlashcardsStore(self.storage).get_decks()
        stored = reloaded[0].cards[0]
        self.assertEqual(stored.difficulty, 8)
        self.assertIsNotNone(stored.updated_at)
        self.assertNotEqual(stored.updated_at, stored.created_at)


if __name__ == '__main__':
    unittest.main()
