from __future__ import annotations

import logging
import os

import customtkinter as ctk
from dotenv import load_dotenv

from plateblur.ui.main_window import MainWindow


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=(os.getenv("PLATEBLUR_LOG_LEVEL") or "INFO").strip().upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctk.set_appearance_mode("System")
    ctk.set_default_color_theme("blue")
    app = MainWindow()
    app.mainloop()
