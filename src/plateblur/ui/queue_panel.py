"""
`queue_panel.py`: список элементов очереди (статус + действия по каждому файлу).

Строки перестраиваются целиком из снимка `ItemQueue` при каждом событии процессора;
очередь обычно небольшая, поэтому инкрементальный diff не нужен.
"""

from __future__ import annotations

import customtkinter as ctk

from plateblur.core.items import ItemStatus, QueueItem

STATUS_TEXT: dict[ItemStatus, str] = {
    ItemStatus.PENDING: "В очереди",
    ItemStatus.DETECTING: "Поиск номеров…",
    ItemStatus.BLURRING: "Размытие…",
    ItemStatus.COMPLETED: "Готово",
    ItemStatus.ERROR: "Ошибка",
}

STATUS_COLOR: dict[ItemStatus, str] = {
    ItemStatus.PENDING: "#94a3b8",
    ItemStatus.DETECTING: "#818cf8",
    ItemStatus.BLURRING: "#c084fc",
    ItemStatus.COMPLETED: "#34d399",
    ItemStatus.ERROR: "#f87171",
}


def status_text(item: QueueItem) -> str:
    if item.status is ItemStatus.ERROR and item.error:
        return item.error
    return STATUS_TEXT[item.status]


def build_queue_panel(app: object) -> None:
    """Средняя колонка: прокручиваемый список файлов."""
    frm = ctk.CTkScrollableFrame(app, width=320, label_text="Очередь")  # type: ignore[arg-type]
    frm.grid(row=0, column=1, sticky="nsew", padx=(0, 12), pady=12)
    frm.grid_columnconfigure(0, weight=1)
    app.queue_frame = frm  # type: ignore[attr-defined]
    app._queue_rows = []  # type: ignore[attr-defined]


def render_queue(app: object, items: list[QueueItem], *, busy: bool) -> None:
    """
    Перерисовывает строки очереди.

    Ожидается, что `app` имеет колбэки `_on_select_item`, `_on_retry_item`, `_on_remove_item`.
    """
    for row in app._queue_rows:  # type: ignore[attr-defined]
        row.destroy()
    app._queue_rows = []  # type: ignore[attr-defined]

    if not items:
        lbl = ctk.CTkLabel(app.queue_frame, text="Очередь пуста", text_color="#888")  # type: ignore[attr-defined]
        lbl.grid(row=0, column=0, sticky="ew", padx=8, pady=8)
        app._queue_rows.append(lbl)  # type: ignore[attr-defined]
        return

    for idx, item in enumerate(items):
        row = ctk.CTkFrame(app.queue_frame)  # type: ignore[attr-defined]
        row.grid(row=idx, column=0, sticky="ew", padx=4, pady=4)
        row.grid_columnconfigure(0, weight=1)

        name = ctk.CTkButton(
            row,
            text=item.file_name,
            anchor="w",
            fg_color="transparent",
            command=lambda i=item.id: app._on_select_item(i),  # type: ignore[attr-defined]
        )
        name.grid(row=0, column=0, sticky="ew", padx=(6, 4), pady=(6, 0))

        ctk.CTkLabel(row, text=status_text(item), text_color=STATUS_COLOR[item.status], anchor="w").grid(
            row=1, column=0, sticky="ew", padx=10, pady=(0, 6)
        )

        if item.status is ItemStatus.ERROR:
            ctk.CTkButton(
                row,
                text="↻",
                width=32,
                state="disabled" if busy else "normal",
                command=lambda i=item.id: app._on_retry_item(i),  # type: ignore[attr-defined]
            ).grid(row=0, column=1, rowspan=2, padx=(0, 4))

        ctk.CTkButton(
            row,
            text="✕",
            width=32,
            fg_color="transparent",
            border_width=1,
            command=lambda i=item.id: app._on_remove_item(i),  # type: ignore[attr-defined]
        ).grid(row=0, column=2, rowspan=2, padx=(0, 6))

        app._queue_rows.append(row)  # type: ignore[attr-defined]
