# main.py
from nicegui import ui
from flashlearn.config import SECRET_KEY
from flashlearn.database import init_db

# --- PAGE IMPORTS (registers the routes) ---
import flashlearn.pages.landing
import flashlearn.pages.app_page
import flashlearn.pages.deck_page
import flashlearn.pages.study_page
import flashlearn.pages.progress_page

ui.add_css('.gradient-bg { background: linear-gradient(135deg, #0f172a 0%, #1e1b4b 100%); }', shared=True)

def main():
    init_db()
    # Start the NiceGUI server
    ui.run(title="FlashLearn", reload=False, port=8080, storage_secret=SECRET_KEY)

# --- STARTUP ---
if __name__ in {"__main__", "__mp_main__"}:
    main()
