"""
`preview_panel.py`: правая часть UI с превью выбранного элемента.

Показывает исходник или результат (переключатель «До / После»). Размер картинки
подгоняется под label при ресайзе окна (debounce внутри `_schedule_preview_rescale()`).
"""

from __future__ import annotations

import tkinter as tk

import customtkinter as ctk


def build_preview_panel(app: object) -> None:
    """
    Собирает правую панель превью.

    Ожидается, что `app` имеет `_schedule_preview_rescale()` и `_on_preview_mode_changed()`.
    """
    right = ctk.CTkFrame(app)  # type: ignore[arg-type]
    right.grid(row=0, column=2, sticky="nsew", padx=(0, 12), pady=12)
    right.grid_rowconfigure(1, weight=1)
    right.grid_columnconfigure(0, weight=1)

    app.preview_mode_var = tk.StringVar(value="После")  # type: ignore[attr-defined]
    app.preview_switch = ctk.CTkSegmentedButton(  # type: ignore[attr-defined]
        right,
        values=["До", "После"],
        variable=app.preview_mode_var,  # type: ignore[attr-defined]
        command=lambda _v: app._on_preview_mode_changed(),  # type: ignore[attr-defined]
    )
    app.preview_switch.grid(row=0, column=0, sticky="w", padx=12, pady=(12, 0))  # type: ignore[attr-defined]

    app.btn_save_one = ctk.CTkButton(right, text="Скачать", width=110, command=app._on_save_selected)  # type: ignore[attr-defined]
    app.btn_save_one.grid(row=0, column=1, sticky="e", padx=12, pady=(12, 0))  # type: ignore[attr-defined]

    app.preview_main = ctk.CTkLabel(right, text="Выберите файл в очереди", anchor="center")  # type: ignore[attr-defined]
    app.preview_main.grid(row=1, column=0, columnspan=2, sticky="nsew", padx=12, pady=12)  # type: ignore[attr-defined]

    app.preview_main.bind("<Configure>", lambda _e: app._schedule_preview_rescale())  # type: ignore[attr-defined]
