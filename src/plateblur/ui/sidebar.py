"""
`sidebar.py`: левая панель: кнопки очереди, прогресс и статус.

`app: object` вместо конкретного класса, чтобы не тянуть циклические импорты;
фактически ожидается `MainWindow`, поэтому доступ к атрибутам помечен `type: ignore`.
"""

from __future__ import annotations

import customtkinter as ctk

from plateblur import __version__ as app_version


def build_sidebar(app: object) -> None:
    """
    Собирает левую панель управления.

    Ожидается, что `app` имеет колбэки: `_on_add_files`, `_on_process_all`,
    `_on_save_all`, `_on_choose_outdir`, `_on_clear_queue`.
    """
    left = ctk.CTkFrame(app, width=300)  # type: ignore[arg-type]
    left.grid(row=0, column=0, sticky="nsew", padx=12, pady=12)
    left.grid_columnconfigure(0, weight=1)

    hdr = ctk.CTkFrame(left, fg_color="transparent")
    hdr.grid(row=0, column=0, sticky="ew", padx=12, pady=(12, 8))
    hdr.grid_columnconfigure(0, weight=1)
    ctk.CTkLabel(hdr, text="AutoBlur", font=ctk.CTkFont(size=22, weight="bold")).grid(row=0, column=0, sticky="w")
    ctk.CTkLabel(hdr, text=f"v{app_version}", text_color="#888").grid(row=0, column=1, sticky="e")

    ctk.CTkLabel(
        left,
        text="Автоматическое размытие номерных знаков.\nФото обрабатываются локально.",
        anchor="w",
        justify="left",
        text_color="#aaa",
    ).grid(row=1, column=0, sticky="ew", padx=12, pady=(0, 12))

    app.btn_add = ctk.CTkButton(left, text="Загрузить…", command=app._on_add_files)  # type: ignore[attr-defined]
    app.btn_add.grid(row=2, column=0, sticky="ew", padx=12, pady=(0, 8))

    app.btn_run = ctk.CTkButton(left, text="Запустить", command=app._on_process_all)  # type: ignore[attr-defined]
    app.btn_run.grid(row=3, column=0, sticky="ew", padx=12, pady=(0, 8))

    app.btn_save_all = ctk.CTkButton(  # type: ignore[attr-defined]
        left,
        text="Скачать все (0)",
        command=app._on_save_all,  # type: ignore[attr-defined]
        fg_color="#059669",
        hover_color="#047857",
    )
    app.btn_save_all.grid(row=4, column=0, sticky="ew", padx=12, pady=(0, 8))

    app.btn_clear = ctk.CTkButton(  # type: ignore[attr-defined]
        left,
        text="Очистить очередь",
        command=app._on_clear_queue,  # type: ignore[attr-defined]
        fg_color="transparent",
        border_width=1,
    )
    app.btn_clear.grid(row=5, column=0, sticky="ew", padx=12, pady=(0, 16))

    # ---- Export ----
    frm_out = ctk.CTkFrame(left)
    frm_out.grid(row=6, column=0, sticky="ew", padx=12, pady=(0, 12))
    frm_out.grid_columnconfigure(0, weight=1)
    ctk.CTkLabel(frm_out, text="Папка сохранения:", anchor="w").grid(row=0, column=0, sticky="ew", padx=10, pady=(10, 4))
    app.lbl_outdir = ctk.CTkLabel(frm_out, text="(не выбрана)", anchor="w", wraplength=240, text_color="#888")  # type: ignore[attr-defined]
    app.lbl_outdir.grid(row=1, column=0, sticky="ew", padx=10, pady=(0, 4))
    ctk.CTkButton(frm_out, text="Выбрать…", command=app._on_choose_outdir).grid(  # type: ignore[attr-defined]
        row=2, column=0, sticky="ew", padx=10, pady=(0, 10)
    )

    # ---- Progress ----
    ctk.CTkLabel(left, text="Прогресс обработки", anchor="w").grid(row=7, column=0, sticky="ew", padx=12, pady=(0, 4))
    app.progress = ctk.CTkProgressBar(left)  # type: ignore[attr-defined]
    app.progress.grid(row=8, column=0, sticky="ew", padx=12, pady=(0, 4))
    app.progress.set(0.0)  # type: ignore[attr-defined]
    app.lbl_progress = ctk.CTkLabel(left, text="0%", anchor="e", text_color="#818cf8")  # type: ignore[attr-defined]
    app.lbl_progress.grid(row=9, column=0, sticky="ew", padx=12, pady=(0, 8))

    app.lbl_status = ctk.CTkLabel(left, text="Статус: добавьте изображения", anchor="w", wraplength=260, justify="left")  # type: ignore[attr-defined]
    app.lbl_status.grid(row=10, column=0, sticky="ew", padx=12, pady=(0, 12))
