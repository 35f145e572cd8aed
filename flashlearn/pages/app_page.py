from nicegui import ui, app, run, events
from flashlearn.core.log_manager import logger
from flashlearn.pages.common import setup_page, create_navbar
from flashlearn.services.deck_service import create_deck, get_decks, delete_deck, reset_deck_progress
from flashlearn.services.import_service import parse_and_preview_deck, save_dto_to_db
from flashlearn.services.progress_service import sync_user_progress

@ui.page('/app')
def app_page():
    if not setup_page(restricted=True):
        return
    create_navbar()

    user_id = app.storage.user.get('id')

    # --- Actions ---
    async def handle_create():
        title = (new_title.value or "").strip()
        if not title:
            ui.notify("Give the deck a title first.", type='warning')
            return
        try:
            deck = await run.io_bound(create_deck, user_id, title, new_description.value or None)
        except Exception as err:
            logger.error(f"Deck creation failed: {err}")
            ui.notify("Could not create deck.", type='negative')
            return
        ui.navigate.to(f'/app/deck?deck_id={deck.id}')

    async def handle_upload(e: events.UploadEventArguments):
        try:
            content = await e.file.text()
            result = parse_and_preview_deck(content)
            title = await run.io_bound(save_dto_to_db, user_id, result['dto'])
            await run.io_bound(sync_user_progress, user_id)
            ui.notify(f"Imported '{title}' ({result['stats']['card_count']} cards)", type='positive')
            deck_list.refresh()
        except ValueError as err:
            ui.notify(str(err), type='warning')
        except Exception as err:
            logger.error(f"Import failed: {err}")
            ui.notify("Error importing file", type='negative')

    async def handle_reset(deck_id: int, title: str):
        try:
            await run.io_bound(reset_deck_progress, user_id, deck_id)
            await run.io_bound(sync_user_progress, user_id)
            ui.notify(f"Progress of '{title}' reset", type='info')
        except Exception as e:
            logger.error(f"Reset error: {e}")
            ui.notify("Could not reset deck.", type='negative')
        deck_list.refresh()

    async def handle_delete(deck_id: int, title: str):
        try:
            success = await run.io_bound(delete_deck, user_id, deck_id)
            await run.io_bound(sync_user_progress, user_id)
        except Exception as e:
            logger.error(f"Deletion error: {e}")
            ui.notify("An unexpected error occurred.", type='negative')
            return
        if success:
            ui.notify(f"Deleted '{title}'", type='positive')
        else:
            ui.notify("Error: Could not delete deck.", type='negative')
        deck_list.refresh()

    # --- Layout ---
    @ui.refreshable
    def deck_list():
        decks = get_decks(user_id)
        if not decks:
            ui.label("No decks yet. Create one or import a JSON deck to get started.").classes('text-gray-400 italic')
            return

        with ui.grid(columns=1).classes('w-full md:grid-cols-3 gap-6'):
            for deck in decks:
                with ui.card().classes('bg-black/30 border border-indigo-600/50 p-4'):
                    ui.label(deck.title).classes('text-xl font-bold text-white')
                    if deck.description:
                        ui.label(deck.description).classes('text-sm text-gray-400 italic')

                    ratio = deck.mastered_count / deck.card_count if deck.card_count else 0.0
                    ui.label(f"{deck.mastered_count} / {deck.card_count} mastered").classes('text-xs font-mono text-gray-400')
                    ui.linear_progress(value=ratio, show_value=False).props('color="green-5" track-color="grey-8" rounded')

                    last = deck.last_studied.strftime("%Y-%m-%d") if deck.last_studied else "Never"
                    ui.label(f"Last studied: {last}").classes('text-xs text-gray-500')

                    with ui.row().classes('w-full justify-end gap-2 mt-2'):
                        ui.button(icon='restart_alt', on_click=lambda d=deck: handle_reset(d.id, d.title))\
                            .props('flat round color=yellow').tooltip("Reset progress")
                        ui.button(icon='edit', on_click=lambda d=deck: ui.navigate.to(f'/app/deck?deck_id={d.id}'))\
                            .props('flat round color=white').tooltip("Edit deck")
                        ui.button(icon='delete', on_click=lambda d=deck: handle_delete(d.id, d.title))\
                            .props('flat round color=red').tooltip("Delete deck")
                        ui.button("Study", icon='play_arrow', on_click=lambda d=deck: ui.navigate.to(f'/app/study?deck_id={d.id}'))\
                            .classes('bg-indigo-600 text-white font-bold')

    with ui.column().classes('w-screen min-h-screen gradient-bg text-white p-8 overflow-y-auto'):
        with ui.column().classes('w-full items-center text-center max-w-3xl mx-auto mb-10'):
            ui.label(f"Welcome back, {app.storage.user.get('name')}").classes('text-5xl font-extrabold text-indigo-400 mt-12')

        with ui.column().classes('w-full max-w-6xl mx-auto gap-8'):
            deck_list()

            with ui.expansion("New deck", icon='add_box').classes('w-full bg-black/20 rounded-lg border border-white/10'):
                new_title = ui.input("Title").classes('w-full')
                new_description = ui.input("Description (optional)").classes('w-full')
                ui.button("Create deck", icon='add', on_click=handle_create).classes('mt-2 bg-indigo-600 text-white')

            with ui.expansion("Import a deck (JSON)", icon='upload_file').classes('w-full bg-black/20 rounded-lg border border-white/10'):
                ui.markdown('`{"title": "...", "description": "...", "cards": [{"front": "...", "back": "..."}]}`')\
                    .classes('text-sm text-gray-300')
                ui.upload(on_upload=handle_upload, max_file_size=1_000_000, multiple=False, auto_upload=True)\
                    .props('accept=".json" flat bordered').classes('w-full mt-2 bg-black/40 rounded-md')
