from nicegui import app, ui
from flashlearn.config import LOCAL_USER_EMAIL, LOCAL_USER_NAME
from flashlearn.services.user_service import get_or_create_user

def login_local_user():
    user = get_or_create_user(LOCAL_USER_EMAIL, LOCAL_USER_NAME)
    app.storage.user['id'] = user.id
    app.storage.user['name'] = user.name

def setup_page(restricted: bool = True, remove_url_params: bool = False) -> bool:
    ui.dark_mode() # Enable dark mode globally. For now, we keep it here.
    ui.add_head_html("<style>html, #c3 { padding: 0 !important;}</style>") # Remove default padding from html and #c3
    if restricted:
        # If the page is restricted, check for user session
        if not app.storage.user.get('id'):
            ui.notify("Please start from the welcome page.", type='negative')
            ui.navigate.to('/')
            return False

    if remove_url_params:
        ui.run_javascript("window.history.replaceState(null, '', window.location.pathname);")

    return True

def create_navbar():
    with ui.header().classes('w-full bg-black text-white justify-between items-center px-6 py-2 shadow-md'):

        with ui.row().classes('items-center gap-4'):
            with ui.button(icon='menu').props('flat round color=white'):
                with ui.menu().props('auto-close'):
                    ui.menu_item("My Decks", on_click=lambda: ui.navigate.to('/app'))
                    ui.menu_item("Progress", on_click=lambda: ui.navigate.to('/app/progress'))

            ui.label("FlashLearn").classes('text-xl font-bold tracking-tight')

        with ui.row().classes('items-center gap-4'):
            with ui.avatar(size='32px').classes('bg-gray-700 cursor-pointer'):
                ui.icon('person')
                with ui.menu().props('auto-close'):
                    ui.menu_item(app.storage.user.get('name', ''))
                    ui.menu_item('Leave', on_click=lambda: ui.navigate.to('/'))
