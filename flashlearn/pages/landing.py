from nicegui import ui
from flashlearn.pages.common import setup_page, login_local_user
from flashlearn.core.log_manager import logger

@ui.page('/')
def landing_page():
    if not setup_page(restricted=False):
        return

    def enter():
        try:
            login_local_user()
        except Exception as e:
            logger.error(f"Could not load local user: {e}")
            ui.notify("Could not open your library.", type='negative')
            return
        ui.navigate.to('/app')

    #Root Container (gradient, fullscreen, card centered)
    with ui.column().classes('w-screen h-screen gradient-bg overflow-hidden justify-center items-center'):
        with ui.card().classes("justify-left transparent shadow-none max-w-4xl w-full p-10"):
            with ui.column().classes('max-w-xxl gap-6'):
                ui.label("FlashLearn").classes('text-6xl font-extrabold text-indigo-300')
                ui.label("Decks, focused study sessions and a daily streak.").classes('text-2xl text-white/80')
                ui.button("Start learning", on_click=enter, icon='play_arrow')\
                    .classes('bg-indigo-600 hover:bg-indigo-500 text-white font-bold mt-4')
