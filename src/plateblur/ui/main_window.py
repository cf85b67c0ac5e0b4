"""
`main_window.py`: главное окно приложения (CustomTkinter).

Ответственности `MainWindow`:
- собрать UI (sidebar + очередь + превью)
- добавлять файлы в `ItemQueue` и запускать обработку через `ProcessingWorker`
- принимать события процессора (переходы состояний/прогресс пакета) и перерисовывать очередь
- сохранять результаты (`blurred_<имя файла>`)

Вся логика детекции/обезличивания находится в `plateblur.core`; окно только читает
состояние очереди и дёргает worker.
"""

from __future__ import annotations

import logging
import os
from tkinter import filedialog, messagebox

import customtkinter as ctk
import cv2
import numpy as np
from PIL import Image

from plateblur import __version__ as app_version
from plateblur.core.config import DetectorConfig, ExportConfig, RedactionConfig
from plateblur.core.errors import RedactionFailure
from plateblur.core.events import BatchProgress, ItemStateChanged
from plateblur.core.export import completed_items, export_item
from plateblur.core.gemini_detector import GeminiPlateDetector
from plateblur.core.intake import load_image_files
from plateblur.core.items import ItemQueue, ItemStatus, queue_progress
from plateblur.core.processor import ProcessingWorker
from plateblur.core.redaction import decode_image
from plateblur.ui.preview_panel import build_preview_panel
from plateblur.ui.queue_panel import build_queue_panel, render_queue
from plateblur.ui.sidebar import build_sidebar

logger = logging.getLogger(__name__)


class MainWindow(ctk.CTk):
    """
    Главное окно.

    Базовый цикл:
    - «Загрузить» добавляет изображения (PENDING) в очередь
    - «Запустить» отдаёт пакет `ProcessingWorker` (фоновый поток с asyncio-циклом)
    - `_tick()` каждые 30 мс забирает события из `worker.poll()` и обновляет UI
    """

    _TICK_MS = 30

    def __init__(self) -> None:
        super().__init__()
        self.title(f"AutoBlur v{app_version}: размытие номеров")
        self.geometry("1200x760")
        self.minsize(1000, 640)
        self.grid_columnconfigure(2, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self._queue = ItemQueue()
        self._detector_cfg = DetectorConfig.from_env()
        self._export_cfg = ExportConfig()
        self._worker = ProcessingWorker(self._queue, GeminiPlateDetector(self._detector_cfg), RedactionConfig())
        self._selected_id: str | None = None
        self._preview_ctkimg: ctk.CTkImage | None = None
        self._last_preview_bgr: np.ndarray | None = None
        self._preview_rescale_after_id: str | None = None

        self._build_ui()
        self._refresh_queue()
        self.protocol("WM_DELETE_WINDOW", self._on_close)
        self._tick()

    def _build_ui(self) -> None:
        build_sidebar(self)
        build_queue_panel(self)
        build_preview_panel(self)

    # ---- queue actions ----

    def _on_add_files(self) -> None:
        paths = filedialog.askopenfilenames(
            title="Выберите изображения",
            filetypes=[
                ("Изображения", "*.jpg *.jpeg *.png *.webp *.bmp *.gif"),
                ("Все файлы", "*.*"),
            ],
        )
        if not paths:
            return
        items = load_image_files(paths)
        self._queue.extend(items)
        skipped = len(paths) - len(items)
        msg = f"Статус: добавлено {len(items)}"
        if skipped:
            msg += f", пропущено {skipped}"
        self.lbl_status.configure(text=msg)
        if self._selected_id is None and items:
            self._selected_id = items[0].id
            self._render_preview()
        self._refresh_queue()

    def _on_process_all(self) -> None:
        if not self._detector_cfg.is_configured:
            messagebox.showwarning("Нет ключа API", "Задайте GEMINI_API_KEY (переменная окружения или .env).")
            return
        try:
            self._worker.process_all()
        except RuntimeError as e:
            messagebox.showinfo("Обработка", str(e))
            return
        self.lbl_status.configure(text="Статус: обработка…")
        self._refresh_queue()

    def _on_retry_item(self, item_id: str) -> None:
        if not self._detector_cfg.is_configured:
            messagebox.showwarning("Нет ключа API", "Задайте GEMINI_API_KEY (переменная окружения или .env).")
            return
        self._worker.process_item(item_id)

    def _on_remove_item(self, item_id: str) -> None:
        # in-flight work is not cancelled; its late updates are ignored by the queue
        self._queue.remove(item_id)
        if self._selected_id == item_id:
            self._selected_id = None
            self._render_preview()
        self._refresh_queue()

    def _on_clear_queue(self) -> None:
        if self._worker.batch_in_progress:
            return
        self._queue.clear()
        self._selected_id = None
        self._render_preview()
        self._refresh_queue()

    def _on_select_item(self, item_id: str) -> None:
        self._selected_id = item_id
        self._render_preview()

    # ---- saving ----

    def _on_choose_outdir(self) -> None:
        d = filedialog.askdirectory(title="Папка сохранения")
        if not d:
            return
        self._export_cfg.out_dir = d
        self.lbl_outdir.configure(text=d)

    def _ensure_outdir(self) -> str | None:
        if not self._export_cfg.out_dir:
            self._on_choose_outdir()
        return self._export_cfg.out_dir or None

    def _save_one(self, item_id: str, out_dir: str) -> None:
        item = self._queue.get(item_id)
        if item is None or item.status is not ItemStatus.COMPLETED:
            return
        try:
            path = export_item(item, out_dir, self._export_cfg.prefix)
        except OSError as e:
            messagebox.showerror("Ошибка сохранения", str(e))
            return
        self.lbl_status.configure(text=f"Статус: сохранено {os.path.basename(path)}")

    def _on_save_selected(self) -> None:
        if self._selected_id is None:
            return
        out_dir = self._ensure_outdir()
        if out_dir:
            self._save_one(self._selected_id, out_dir)

    def _on_save_all(self) -> None:
        completed = [i.id for i in completed_items(self._queue.snapshot())]
        if not completed:
            return
        out_dir = self._ensure_outdir()
        if not out_dir:
            return
        # one file per step, `stagger_s` apart
        step_ms = int(self._export_cfg.stagger_s * 1000)
        for idx, item_id in enumerate(completed):
            self.after(idx * step_ms, lambda i=item_id: self._save_one(i, out_dir))

    # ---- worker events ----

    def _tick(self) -> None:
        """Tkinter не потокобезопасен: события worker'а применяем только здесь, в главном потоке."""
        changed = False
        for ev in self._worker.poll(max_items=50):
            if isinstance(ev, ItemStateChanged):
                changed = True
                if ev.item_id == self._selected_id and ev.status is ItemStatus.COMPLETED:
                    self._render_preview()
            elif isinstance(ev, BatchProgress):
                changed = True
                if ev.in_progress:
                    self.lbl_status.configure(text=f"Статус: обработка {ev.done} / {ev.total}")
                else:
                    self.lbl_status.configure(text=f"Статус: готово ({ev.done} / {ev.total})")
        if changed:
            self._refresh_queue()
        self.after(self._TICK_MS, self._tick)

    def _refresh_queue(self) -> None:
        items = self._queue.snapshot()
        busy = self._worker.batch_in_progress
        render_queue(self, items, busy=busy)

        p = queue_progress(items)
        self.progress.set(p)
        self.lbl_progress.configure(text=f"{round(p * 100)}%")

        completed = len(completed_items(items))
        self.btn_save_all.configure(text=f"Скачать все ({completed})", state="normal" if completed else "disabled")
        all_done = bool(items) and completed == len(items)
        self.btn_run.configure(state="disabled" if (busy or not items or all_done) else "normal")
        self.btn_clear.configure(state="disabled" if busy else "normal")

    # ---- preview ----

    def _on_preview_mode_changed(self) -> None:
        self._render_preview()

    def _render_preview(self) -> None:
        item = self._queue.get(self._selected_id) if self._selected_id else None
        if item is None:
            self._last_preview_bgr = None
            self._preview_ctkimg = None
            self.preview_main.configure(image=None, text="Выберите файл в очереди")
            return
        show_processed = self.preview_mode_var.get() == "После" and item.processed is not None
        data = item.processed if show_processed else item.original
        try:
            bgr = decode_image(data)
        except RedactionFailure as e:
            self.preview_main.configure(image=None, text=f"Предпросмотр недоступен: {e}")
            return
        self._set_preview_bgr(bgr)

    def _set_preview_bgr(self, bgr: np.ndarray) -> None:
        """BGR (OpenCV) -> RGB (PIL) -> CTkImage, вписанный в размер label."""
        self._last_preview_bgr = bgr
        img = Image.fromarray(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB))
        w = max(10, self.preview_main.winfo_width())
        h = max(10, self.preview_main.winfo_height())
        img.thumbnail((w, h))
        self._preview_ctkimg = ctk.CTkImage(light_image=img, dark_image=img, size=(img.width, img.height))
        self.preview_main.configure(image=self._preview_ctkimg, text="")

    def _schedule_preview_rescale(self) -> None:
        if self._preview_rescale_after_id is not None:
            self.after_cancel(self._preview_rescale_after_id)
        self._preview_rescale_after_id = self.after(60, self._rescale_preview_from_cache)

    def _rescale_preview_from_cache(self) -> None:
        self._preview_rescale_after_id = None
        if self._last_preview_bgr is not None and self._last_preview_bgr.size != 0:
            self._set_preview_bgr(self._last_preview_bgr)

    def _on_close(self) -> None:
        self._worker.stop()
        self.destroy()
