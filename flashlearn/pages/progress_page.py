from nicegui import ui, app, run
from flashlearn.core.log_manager import logger
from flashlearn.pages.common import setup_page, create_navbar
from flashlearn.services.deck_service import get_decks
from flashlearn.services.progress_service import sync_user_progress

@ui.page('/app/progress')
async def progress_page():
    if not setup_page(restricted=True):
        return
    create_navbar()

    user_id = app.storage.user.get('id')
    try:
        progress = await run.io_bound(sync_user_progress, user_id)
        decks = await run.io_bound(get_decks, user_id)
    except Exception as e:
        logger.error(f"Could not load progress: {e}")
        ui.notify("Could not load your progress.", type='negative')
        return

    overall = progress.mastered_cards / progress.total_cards if progress.total_cards else 0.0

    with ui.column().classes('w-screen min-h-screen gradient-bg text-white p-8 items-center'):
        ui.label("Your Progress").classes('text-5xl font-extrabold text-indigo-400 mt-8 mb-8')

        with ui.row().classes('gap-6 justify-center'):
            for caption, value in (
                ("Mastered", f"{progress.mastered_cards} / {progress.total_cards}"),
                ("Current Streak", f"{progress.current_streak}"),
                ("Longest Streak", f"{progress.longest_streak}"),
            ):
                with ui.card().classes('bg-black/30 border border-white/10 p-6 items-center min-w-[10rem]'):
                    ui.label(value).classes('text-3xl font-bold')
                    ui.label(caption).classes('text-xs uppercase tracking-wider text-gray-400')

        ui.circular_progress(value=round(overall, 2), max=1, size='8rem', color='green').classes('mt-8')

        with ui.column().classes('w-full max-w-3xl gap-3 mt-8'):
            if not decks:
                ui.label("No decks created yet. Create your first deck to start tracking progress!")\
                    .classes('text-gray-400 italic')
            for deck in decks:
                ratio = deck.mastered_count / deck.card_count if deck.card_count else 0.0
                with ui.row().classes('w-full items-center justify-between'):
                    ui.label(deck.title).classes('font-bold')
                    ui.label(f"{deck.mastered_count}/{deck.card_count}").classes('font-mono text-gray-400')
                ui.linear_progress(value=ratio, show_value=False).props('color="green-5" track-color="grey-8" rounded')

        if progress.current_streak > 0:
            ui.label(f"Keep up your {progress.current_streak}-day streak!").classes('text-lg text-yellow-300 mt-8')
