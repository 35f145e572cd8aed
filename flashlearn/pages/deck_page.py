from functools import partial
from nicegui import ui, app, run
from flashlearn.core.log_manager import logger
from flashlearn.pages.common import setup_page, create_navbar
from flashlearn.services.deck_service import (
    DeckNotFoundError,
    add_card,
    delete_card,
    get_deck,
    mark_cards_mastered,
    update_card,
    update_deck,
)
from flashlearn.services.import_service import sanitize_html
from flashlearn.services.progress_service import sync_user_progress

def clean_card_text(front: str, back: str):
    """Sanitised front/back, or None if either side ends up empty."""
    front = sanitize_html((front or "").strip())
    back = sanitize_html((back or "").strip())
    if not front or not back:
        return None
    return front, back

@ui.page('/app/deck')
def deck_page(deck_id: int = None):
    if not setup_page(restricted=True):
        return

    if not deck_id:
        logger.warning("Deck page accessed without deck_id parameter.")
        ui.navigate.to('/app')
        return

    user_id = app.storage.user.get('id')
    deck = get_deck(user_id, deck_id)
    if deck is None:
        logger.warning(f"Unauthorized access attempt to Deck {deck_id} by User {user_id}")
        ui.notify("Deck not found.", type='negative')
        ui.navigate.to('/app')
        return

    create_navbar()

    # Card currently open in the edit dialog
    edit_state = {"id": None}

    # --- Actions ---
    async def save_details():
        try:
            await run.io_bound(update_deck, user_id, deck_id, title=title_input.value, description=description_input.value)
            ui.notify("Deck saved", type='positive')
        except ValueError as e:
            ui.notify(str(e), type='warning')
        except Exception as e:
            logger.error(f"Deck update error: {e}")
            ui.notify("Could not save deck.", type='negative')

    async def handle_add():
        cleaned = clean_card_text(new_front.value, new_back.value)
        if cleaned is None:
            ui.notify("Both sides of a card need text.", type='warning')
            return
        try:
            await run.io_bound(add_card, user_id, deck_id, *cleaned)
            await run.io_bound(sync_user_progress, user_id)
        except DeckNotFoundError:
            ui.notify("Deck not found.", type='negative')
            ui.navigate.to('/app')
            return
        except Exception as e:
            logger.error(f"Add card error: {e}")
            ui.notify("Could not add card.", type='negative')
            return
        new_front.set_value("")
        new_back.set_value("")
        card_list.refresh()

    async def handle_delete(card_id: int):
        try:
            success = await run.io_bound(delete_card, user_id, card_id)
            await run.io_bound(sync_user_progress, user_id)
        except Exception as e:
            logger.error(f"Delete card error: {e}")
            ui.notify("An unexpected error occurred.", type='negative')
            return
        if not success:
            ui.notify("Error: Could not delete card.", type='negative')
        card_list.refresh()

    async def handle_mastered(card_id: int, e):
        try:
            await run.io_bound(update_card, user_id, card_id, mastered=e.value)
            await run.io_bound(sync_user_progress, user_id)
        except Exception as err:
            logger.error(f"Mastery toggle error: {err}")
            ui.notify("Could not update card.", type='negative')
        card_list.refresh()

    async def handle_master_all():
        current = get_deck(user_id, deck_id)
        if current is None:
            return
        try:
            touched = await run.io_bound(mark_cards_mastered, user_id, [c.id for c in current.cards])
            await run.io_bound(sync_user_progress, user_id)
            ui.notify(f"{touched} cards marked as mastered", type='positive')
        except Exception as e:
            logger.error(f"Mark mastered error: {e}")
            ui.notify("Could not update cards.", type='negative')
        card_list.refresh()

    async def save_edit():
        card_id = edit_state["id"]
        if not card_id:
            return
        cleaned = clean_card_text(edit_front.value, edit_back.value)
        if cleaned is None:
            ui.notify("Both sides of a card need text.", type='warning')
            return
        edit_dialog.close()
        try:
            updated = await run.io_bound(update_card, user_id, card_id, front=cleaned[0], back=cleaned[1])
        except Exception as e:
            logger.error(f"Edit card error: {e}")
            ui.notify("Could not save card.", type='negative')
            return
        if updated is None:
            ui.notify("Error: Card no longer exists.", type='negative')
        card_list.refresh()

    # --- Reusable Dialog Definition ---
    with ui.dialog() as edit_dialog, ui.card().classes('bg-gray-900 border border-white/10 w-full max-w-xl'):
        ui.label("Edit card").classes('text-xl font-bold text-white')
        edit_front = ui.textarea("Front").classes('w-full')
        edit_back = ui.textarea("Back").classes('w-full')
        with ui.row().classes('w-full justify-end gap-4 mt-6'):
            ui.button("Cancel", on_click=edit_dialog.close).props('flat color=white')
            ui.button("Save", color='indigo', on_click=save_edit).props('raised')

    def open_edit_dialog(card):
        edit_state["id"] = card.id
        edit_front.set_value(card.front)
        edit_back.set_value(card.back)
        edit_dialog.open()

    # --- Layout ---
    @ui.refreshable
    def card_list():
        current = get_deck(user_id, deck_id)
        if current is None:
            ui.label("Deck not found.").classes('text-red-400')
            return

        with ui.row().classes('w-full justify-between items-end'):
            ui.label(f"{current.mastered_count} / {current.card_count} mastered").classes('text-sm font-mono text-gray-400')
            ui.button("Mark all mastered", icon='done_all', on_click=handle_master_all)\
                .props('flat color=green').classes('text-sm')

        if not current.cards:
            ui.label("This deck has no cards yet.").classes('text-gray-400 italic')
            return

        for card in current.cards:
            with ui.card().classes('w-full bg-black/30 border border-white/10 p-4'):
                with ui.row().classes('w-full items-start justify-between no-wrap gap-4'):
                    with ui.column().classes('gap-1 flex-grow'):
                        ui.markdown(card.front).classes('text-white font-bold')
                        ui.markdown(card.back).classes('text-gray-400 text-sm')
                    with ui.row().classes('items-center gap-0 no-wrap'):
                        ui.switch("Mastered", value=card.mastered, on_change=partial(handle_mastered, card.id))\
                            .props('color=green dense').classes('text-xs text-gray-400')
                        ui.button(icon='edit', on_click=partial(open_edit_dialog, card))\
                            .props('flat round dense color=white').tooltip("Edit card")
                        ui.button(icon='delete', on_click=partial(handle_delete, card.id))\
                            .props('flat round dense color=red').tooltip("Delete card")

    with ui.column().classes('w-screen min-h-screen gradient-bg text-white p-8 overflow-y-auto'):
        with ui.column().classes('w-full max-w-4xl mx-auto gap-6'):

            # 1. DETAILS
            with ui.row().classes('w-full items-center gap-2'):
                ui.button(icon='arrow_back', on_click=lambda: ui.navigate.to('/app')).props('flat round color=white')
                ui.label("Edit deck").classes('text-3xl font-bold text-indigo-300')

            title_input = ui.input("Title", value=deck.title).classes('w-full')
            description_input = ui.input("Description", value=deck.description or "").classes('w-full')
            with ui.row().classes('w-full justify-end gap-2'):
                ui.button("Save details", icon='save', on_click=save_details).classes('bg-indigo-600 text-white')
                ui.button("Study", icon='play_arrow', on_click=lambda: ui.navigate.to(f'/app/study?deck_id={deck_id}'))\
                    .classes('bg-green-700 text-white')

            ui.separator().classes('bg-white/20')

            # 2. NEW CARD
            with ui.card().classes('w-full bg-indigo-900/20 border border-indigo-600/50 p-4'):
                ui.label("Add a card").classes('text-lg font-bold text-indigo-200')
                new_front = ui.textarea("Front").classes('w-full')
                new_back = ui.textarea("Back").classes('w-full')
                ui.button("Add card", icon='add', on_click=handle_add).classes('self-end bg-indigo-600 text-white')

            # 3. CARDS
            card_list()
