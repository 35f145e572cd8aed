from typing import List, Optional
from nicegui import ui, app, run, events

from flashlearn.pages.common import setup_page, create_navbar
from flashlearn.components.ui_scheduler import UiTimerScheduler
from flashlearn.core.log_manager import logger
from flashlearn.core.reveal_timer import RevealTimer
from flashlearn.core.session_engine import SessionError, SessionPhase
from flashlearn.schemas import StudyCard
from flashlearn.services.deck_service import DeckNotFoundError
from flashlearn.services.study_service import SyncError, complete_study_session, start_study_session

def bind_session_lifetime(client, engine) -> None:
    """
    Disposes the engine when NiceGUI deletes the client. Short socket drops
    reconnect to the same page, so the session has to survive them.
    """
    client.on_delete(engine.dispose)

def try_flip(engine) -> bool:
    try:
        engine.flip()
    except SessionError as e:
        logger.warning(f"Ignored flip: {e}")
        return False
    return True

class StudyPageState:
    def __init__(self):
        self.finished_cards: Optional[List[StudyCard]] = None
        self.sync_status: str = "idle" # idle | syncing | success | error
        self.busy: bool = False

@ui.page('/app/study')
def study_page(deck_id: int = None):
    # 1. Security & Setup
    if not setup_page(restricted=True, remove_url_params=True):
        return

    if not deck_id:
        logger.warning("Study page accessed without deck_id parameter.")
        ui.navigate.to('/app')
        return

    create_navbar()

    state = StudyPageState()
    user_id = app.storage.user.get('id')

    # --- UI REFERENCES (Placeholders) ---
    front_content = None
    back_content = None
    back_container = None
    flip_btn = None
    controls_container = None
    progress_label = None
    progress_bar = None
    pass_label = None
    arena = None
    results = None
    result_label = None
    sync_label = None
    retry_btn = None

    # --- ENGINE CALLBACKS ---
    def on_complete(cards: List[StudyCard]):
        state.finished_cards = cards

    def on_reveal(card: StudyCard):
        render_card()

    # 2. Load deck and start the engine
    try:
        deck, engine = start_study_session(
            user_id,
            deck_id,
            timer=RevealTimer(UiTimerScheduler()),
            on_complete=on_complete,
            on_reveal=on_reveal,
        )
    except DeckNotFoundError:
        logger.warning(f"Unauthorized access attempt to Deck {deck_id} by User {user_id}")
        ui.notify("Deck not found.", type='negative')
        ui.navigate.to('/app')
        return
    except Exception as e:
        logger.error(f"Error loading study page: {e}")
        ui.notify("System Error: Could not load deck.", type='negative')
        ui.navigate.to('/app')
        return

    bind_session_lifetime(ui.context.client, engine)

    # --- LOGIC CONTROLLERS ---
    def render_card():
        if engine.is_session_complete():
            arena.set_visibility(False)
            results.set_visibility(True)
            return

        card = engine.current_card()
        front_content.set_content(card.front)
        back_content.set_content(card.back)
        back_container.set_visibility(engine.is_flipped)
        controls_container.set_visibility(engine.is_flipped)
        flip_btn.set_text("HIDE (Space)" if engine.is_flipped else "REVEAL (Space)")

        progress_label.set_text(f"{engine.completed_count} / {engine.total_cards}")
        progress_bar.set_value(engine.progress)
        pass_label.set_text(
            "Review pass " + str(engine.pass_number)
            if engine.phase is SessionPhase.IN_REVIEW_PASS else ""
        )

    def render_sync():
        texts = {
            "syncing": "Saving your progress...",
            "success": "Progress saved.",
            "error": "Could not save your progress.",
        }
        sync_label.set_text(texts.get(state.sync_status, ""))
        retry_btn.set_visibility(state.sync_status == "error")

    async def sync_results():
        if state.finished_cards is None:
            return
        state.busy = True
        state.sync_status = "syncing"
        render_sync()
        try:
            result = await run.io_bound(complete_study_session, user_id, deck_id, state.finished_cards)
            state.sync_status = "success"
            result_label.set_text(
                f"{result.deck.mastered_count} of {result.deck.card_count} cards mastered. "
                f"Streak: {result.progress.current_streak} day(s)."
            )
        except SyncError as e:
            # Local results stay as they are until a retry succeeds
            logger.error(f"Session sync failed: {e}")
            state.sync_status = "error"
        finally:
            state.busy = False
        render_sync()

    def flip():
        if state.busy or engine.is_session_complete():
            return
        if not try_flip(engine):
            ui.notify("This session has ended. Reload the page to study again.", type='warning')
            return
        render_card()

    async def answer(known: bool):
        if state.busy or engine.is_session_complete():
            return
        try:
            if known:
                engine.mark_known()
            else:
                engine.mark_review()
        except SessionError as e:
            logger.warning(f"Ignored answer: {e}")
            ui.notify("This session has ended. Reload the page to study again.", type='warning')
            return

        render_card()
        if engine.is_session_complete():
            await sync_results()

    def restart():
        if state.busy:
            return
        try:
            engine.restart()
        except SessionError as e:
            logger.warning(f"Ignored restart: {e}")
            ui.notify("This session has ended. Reload the page to study again.", type='warning')
            return
        state.finished_cards = None
        state.sync_status = "idle"
        arena.set_visibility(not engine.is_session_complete())
        results.set_visibility(False)
        render_card()

    # --- KEYBOARD ---
    async def handle_key(e: events.KeyEventArguments):
        if not e.action.keydown or engine.is_session_complete():
            return
        if e.key == ' ':
            flip()
        elif engine.is_flipped:
            if e.key == '1' or e.key == 'ArrowLeft': await answer(False)
            elif e.key == '2' or e.key == 'ArrowRight': await answer(True)

    ui.keyboard(on_key=handle_key)

    # --- LAYOUT ---
    with ui.column().classes('w-screen min-h-screen gradient-bg text-white items-center p-4'):

        ui.label("Study session").classes('text-gray-400 text-sm font-bold tracking-widest uppercase mb-2')
        ui.label(deck.title).classes('text-3xl font-extrabold text-indigo-300 mb-8 text-center')

        if engine.is_session_complete():
            # Nothing left to study; don't enter the card loop at all
            with ui.column().classes('items-center gap-4'):
                ui.icon('task_alt', size='5rem').classes('text-green-400')
                ui.label("Nothing to study: every card in this deck is mastered.").classes('text-xl text-gray-300')
                ui.button("Back to decks", on_click=lambda: ui.navigate.to('/app')).classes('bg-indigo-600 text-white')
            return

        with ui.column().classes('w-full sm:max-w-4xl items-center') as arena:
            # HUD
            with ui.row().classes('w-full justify-between items-center mb-4'):
                with ui.column().classes('w-1/2'):
                    progress_label = ui.label("0 / 0").classes('text-xs text-gray-400 font-mono')
                    progress_bar = ui.linear_progress(value=0, show_value=False)\
                        .props('size="10px" color="indigo-400" track-color="grey-8" rounded')
                pass_label = ui.label("").classes('text-sm italic text-yellow-400')

            # Card
            with ui.card().classes('w-full min-h-[400px] bg-gray-900 border border-white/20 flex flex-col items-center justify-center p-8'):
                front_content = ui.markdown("").classes('text-xl text-center text-white')
                with ui.column().classes('w-full items-center fade-in') as back_container:
                    ui.separator().classes('w-1/2 my-6 opacity-30')
                    back_content = ui.markdown("").classes('text-lg text-center text-gray-300')

            # Controls
            with ui.column().classes('w-full items-center mt-6'):
                flip_btn = ui.button("REVEAL (Space)", on_click=flip)\
                    .props('size=lg color=indigo-600').classes('w-full max-w-sm font-bold tracking-widest')

                with ui.row().classes('gap-4 w-full justify-center mt-4') as controls_container:
                    ui.button("Review again", icon='replay', on_click=lambda: answer(False))\
                        .props('color=red-900 size=lg').classes('border border-red-500')
                    ui.button("Know it", icon='check', on_click=lambda: answer(True))\
                        .props('color=green-900 size=lg').classes('border border-green-500')

            ui.button(icon='restart_alt', on_click=restart).props('flat round color=grey').tooltip("Restart session")

        # Results
        with ui.column().classes('w-full items-center text-center gap-6 py-10') as results:
            ui.icon('emoji_events', size='6rem').classes('text-yellow-400 animate-bounce')
            ui.label("Session complete!").classes('text-4xl font-black text-white')
            result_label = ui.label("").classes('text-xl text-gray-300')
            sync_label = ui.label("").classes('text-sm text-gray-400')
            retry_btn = ui.button("Retry saving", icon='sync', on_click=sync_results).props('color=orange')
            with ui.row().classes('gap-4'):
                ui.button("Study again", on_click=restart).classes('border border-white transparent')
                ui.button("Back to decks", on_click=lambda: ui.navigate.to('/app')).classes('bg-indigo-600 text-white')
        results.set_visibility(False)
        retry_btn.set_visibility(False)

    render_card()
