"""Tk user interface: the album window and the image preview dialog."""

from __future__ import annotations

import argparse
import os
import queue
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable

import tkinter as tk
from tkinter import filedialog, messagebox, ttk

from PIL import Image, ImageTk

from imagealbum.adjust import Adjustments
from imagealbum.gallery import Gallery, describe_selection, list_drives, pick_default_drive
from imagealbum.preview import GeometryTracker, PreviewError, PreviewSession, Rect
from imagealbum.scanner import THUMBNAIL_SIZE, ImageScanner, ScanBatch, make_thumbnail

WINDOW_TITLE = "相册"
PREVIEW_TITLE = "图片预览"
PREVIEW_SIZE = (1280, 800)
SLIDER_RANGE = (-100, 100)
POLL_MS = 20

SLIDER_LABELS = {
    "brightness": "亮度",
    "contrast": "对比度",
    "saturation": "饱和度",
    "exposure": "曝光度",
    "clarity": "清晰度",
    "temperature": "色温",
    "sharpen": "锐化",
}


def fit_size(image_size: tuple[int, int], box_size: tuple[int, int]) -> tuple[int, int]:
    """Largest size with the image's aspect ratio that fits inside ``box_size``."""
    width, height = image_size
    box_w, box_h = box_size
    if width <= 0 or height <= 0:
        raise ValueError("image size must be positive")
    if box_w <= 0 or box_h <= 0:
        raise ValueError("box size must be positive")
    scaled_w = box_h * width // height
    if scaled_w <= box_w:
        return max(scaled_w, 1), box_h
    return box_w, max(box_w * height // width, 1)


class PreviewDialog:
    """Modal window that shows one image with adjustment sliders."""

    def __init__(
        self,
        master: tk.Misc,
        path: str | os.PathLike[str],
        on_saved: Callable[[Path], None] | None = None,
        on_deleted: Callable[[Path], None] | None = None,
    ) -> None:
        self.path = Path(path)
        self.on_saved = on_saved
        self.on_deleted = on_deleted
        self.window = tk.Toplevel(master)
        self.window.title(PREVIEW_TITLE)
        self.window.geometry(f"{PREVIEW_SIZE[0]}x{PREVIEW_SIZE[1]}")
        self.window.transient(master)
        self.window.protocol("WM_DELETE_WINDOW", self.close)

        self.session = PreviewSession(self.path)
        self._executor = ThreadPoolExecutor(max_workers=1)
        self._future: Future | None = None
        self._photo: ImageTk.PhotoImage | None = None
        self._last_state = self.window.state()
        self.window.update_idletasks()
        self.tracker = GeometryTracker(self._current_rect())

        self._build()
        self.window.bind("<Configure>", self._on_configure)
        self.window.grab_set()
        self.window.after_idle(self._request_refresh)

    def _build(self) -> None:
        body = tk.Frame(self.window)
        body.pack(fill=tk.BOTH, expand=True)
        self.canvas = tk.Canvas(body, background="#202020", highlightthickness=0)
        self.canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)

        controls = tk.Frame(body, padx=8, pady=8)
        controls.pack(side=tk.RIGHT, fill=tk.Y)
        self.value_labels: dict[str, tk.Label] = {}
        enabled = self.session.image is not None
        for name, caption in SLIDER_LABELS.items():
            row = tk.Frame(controls)
            row.pack(fill=tk.X, pady=2)
            tk.Label(row, text=caption, width=6, anchor="w").pack(side=tk.LEFT)
            value_label = tk.Label(row, text="0", width=5)
            value_label.pack(side=tk.RIGHT)
            self.value_labels[name] = value_label
            scale = tk.Scale(
                row,
                from_=SLIDER_RANGE[0],
                to=SLIDER_RANGE[1],
                orient=tk.HORIZONTAL,
                resolution=1,
                showvalue=False,
                length=200,
            )
            if enabled:
                scale.configure(command=lambda value, n=name: self._on_slider(n, value))
            scale.pack(side=tk.LEFT, fill=tk.X, expand=True)

        buttons = tk.Frame(controls)
        buttons.pack(fill=tk.X, pady=(16, 0))
        tk.Button(buttons, text="保存", command=self.save).pack(fill=tk.X, pady=2)
        tk.Button(buttons, text="另存为", command=self.save_as).pack(fill=tk.X, pady=2)
        tk.Button(buttons, text="删除", command=self.delete).pack(fill=tk.X, pady=2)

    def _current_rect(self) -> Rect:
        w = self.window
        return Rect(w.winfo_x(), w.winfo_y(), w.winfo_width(), w.winfo_height())

    def _on_configure(self, event: tk.Event) -> None:
        if event.widget is not self.window:
            return
        state = self.window.state()
        if state != self._last_state:
            was_max = self._last_state == "zoomed"
            is_max = state == "zoomed"
            self._last_state = state
            target = self.tracker.on_state_change(was_max, is_max)
            if target is not None:
                self.window.after_idle(self._restore_geometry)
        self.tracker.on_resize(self._current_rect(), normal_state=state == "normal")
        if self.session.image is not None:
            self._request_refresh()

    def _restore_geometry(self) -> None:
        self.window.minsize(1, 1)
        self.window.state("normal")
        rect = self.tracker.normal_geometry
        self.window.geometry(f"{rect.width}x{rect.height}+{rect.x}+{rect.y}")
        self.tracker.finish_restore()
        self._request_refresh()

    def _on_slider(self, name: str, value: str) -> None:
        number = int(float(value))
        self.session.set_adjustment(name, number)
        self.value_labels[name].configure(text=str(number))
        self._request_refresh()

    def _canvas_size(self) -> tuple[int, int]:
        width, height = self.canvas.winfo_width(), self.canvas.winfo_height()
        if width <= 1 or height <= 1:
            return PREVIEW_SIZE
        return width, height

    def _request_refresh(self) -> None:
        if self.session.image is None:
            return
        if self._future is not None and not self._future.done():
            return
        self._future = self._executor.submit(self.session.preview, self._canvas_size())
        self.window.after(POLL_MS, self._poll_refresh)

    def _poll_refresh(self) -> None:
        future = self._future
        if future is None:
            return
        if not future.done():
            self.window.after(POLL_MS, self._poll_refresh)
            return
        try:
            picture = future.result()
        except (PreviewError, ValueError):
            return
        self._show(picture)

    def _show(self, picture: Image.Image) -> None:
        if not self.canvas.winfo_exists():
            return
        self._photo = ImageTk.PhotoImage(picture)
        width, height = self._canvas_size()
        self.canvas.delete("all")
        self.canvas.create_image(width // 2, height // 2, image=self._photo)

    def save(self) -> None:
        """Overwrite the file with the adjusted image."""
        if self.session.image is None:
            messagebox.showwarning("错误", "无法保存：图片数据为空！", parent=self.window)
            return
        try:
            saved = self.session.save()
        except PreviewError:
            messagebox.showwarning("保存失败", "无法保存图片！", parent=self.window)
            return
        messagebox.showinfo("保存成功", "图片已成功保存！", parent=self.window)
        if self.on_saved is not None:
            self.on_saved(saved)

    def save_as(self) -> None:
        """Write the adjusted image to a file the user picks."""
        if self.session.image is None:
            messagebox.showwarning("错误", "无法另存为：图片数据为空！", parent=self.window)
            return
        target = filedialog.asksaveasfilename(
            parent=self.window,
            title="另存为",
            filetypes=[("PNG", "*.png"), ("JPEG", "*.jpg *.jpeg"), ("BMP", "*.bmp")],
        )
        if not target:
            return
        try:
            self.session.save_as(target)
        except (PreviewError, ValueError):
            messagebox.showwarning("另存为失败", "无法保存图片！", parent=self.window)
            return
        messagebox.showinfo("另存为成功", "图片已成功另存为！", parent=self.window)

    def delete(self) -> None:
        """Delete the file after confirmation and close the dialog."""
        if not messagebox.askyesno("删除确认", "确定要删除这张图片吗？", parent=self.window):
            return
        try:
            removed = self.session.delete()
        except PreviewError:
            messagebox.showwarning("删除失败", "无法删除图片！", parent=self.window)
            return
        messagebox.showinfo("删除成功", "图片已被删除！", parent=self.window)
        if self.on_deleted is not None:
            self.on_deleted(removed)
        self.close()

    def close(self) -> None:
        """Wait for background rendering and close the window."""
        self._executor.shutdown(wait=True)
        self._future = None
        if self.window.winfo_exists():
            self.window.grab_release()
            self.window.destroy()


_SCAN_DONE = object()


class MainWindow:
    """Album window: drive list, thumbnail grid, details and progress."""

    def __init__(self, root: tk.Tk) -> None:
        self.root = root
        self.root.title(WINDOW_TITLE)
        self.gallery = Gallery()
        self._iid_to_path: dict[str, Path] = {}
        self._photos: dict[str, ImageTk.PhotoImage] = {}
        self._queue: queue.Queue = queue.Queue()
        self._cancel = threading.Event()
        self._thread: threading.Thread | None = None
        self._generation = 0
        self._build()
        self.drives = list_drives()
        for drive in self.drives:
            self.drive_list.insert(tk.END, drive)
        self.root.after(100, self._select_default_drive)
        self.root.after(POLL_MS, self._poll_queue)

    def _build(self) -> None:
        main = tk.Frame(self.root)
        main.pack(fill=tk.BOTH, expand=True)
        self.drive_list = tk.Listbox(main, width=12, exportselection=False)
        self.drive_list.pack(side=tk.LEFT, fill=tk.Y)
        self.drive_list.bind("<<ListboxSelect>>", self._on_drive_selected)

        right = tk.Frame(main)
        right.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        style = ttk.Style(self.root)
        style.configure("Album.Treeview", rowheight=THUMBNAIL_SIZE + 8)
        self.grid = ttk.Treeview(right, show="tree", style="Album.Treeview", selectmode="browse")
        scroll = ttk.Scrollbar(right, orient=tk.VERTICAL, command=self.grid.yview)
        self.grid.configure(yscrollcommand=scroll.set)
        scroll.pack(side=tk.RIGHT, fill=tk.Y)
        self.grid.pack(fill=tk.BOTH, expand=True)
        self.grid.bind("<<TreeviewSelect>>", self._on_selection_changed)
        self.grid.bind("<Double-1>", self._on_double_click)

        info = tk.Frame(self.root)
        info.pack(fill=tk.X)
        path_text, time_text, size_text = describe_selection(None)
        self.path_label = tk.Label(info, text=path_text, anchor="w")
        self.path_label.pack(fill=tk.X)
        self.time_label = tk.Label(info, text=time_text, anchor="w")
        self.time_label.pack(fill=tk.X)
        self.size_label = tk.Label(info, text=size_text, anchor="w")
        self.size_label.pack(fill=tk.X)
        self.progress = ttk.Progressbar(self.root, maximum=100)

    def _select_default_drive(self) -> None:
        drive = pick_default_drive(self.drives)
        if drive is None:
            return
        index = self.drives.index(drive)
        self.drive_list.selection_clear(0, tk.END)
        self.drive_list.selection_set(index)
        self.drive_list.activate(index)
        self.load_images_async(drive)

    def _on_drive_selected(self, _event: tk.Event) -> None:
        selection = self.drive_list.curselection()
        if selection:
            self.load_images_async(self.drives[selection[0]])

    def load_images_async(self, path: str | os.PathLike[str]) -> None:
        """Cancel any running scan and start scanning ``path``."""
        if self._thread is not None and self._thread.is_alive():
            self._cancel.set()
            self._thread.join()
        self._cancel = threading.Event()
        self._generation += 1
        self.gallery.clear()
        self._iid_to_path.clear()
        self._photos.clear()
        self.grid.delete(*self.grid.get_children())
        self.progress["value"] = 0
        self.progress.pack(fill=tk.X)
        scanner = ImageScanner(path, cancel_event=self._cancel)
        self._thread = threading.Thread(
            target=self._run_scan, args=(scanner, self._generation), daemon=True
        )
        self._thread.start()

    def _run_scan(self, scanner: ImageScanner, generation: int) -> None:
        for batch in scanner.scan():
            self._queue.put((generation, batch))
        self._queue.put((generation, (_SCAN_DONE, tuple(scanner.failed_files))))

    def _poll_queue(self) -> None:
        try:
            while True:
                generation, payload = self._queue.get_nowait()
                if generation != self._generation:
                    continue
                if isinstance(payload, ScanBatch):
                    self._handle_batch(payload)
                else:
                    self._on_images_loaded(payload[1])
        except queue.Empty:
            pass
        self.root.after(POLL_MS, self._poll_queue)

    def _handle_batch(self, batch: ScanBatch) -> None:
        for item in self.gallery.add_images(batch.images):
            photo = ImageTk.PhotoImage(item.thumbnail)
            iid = self.grid.insert("", tk.END, text=item.label, image=photo)
            self._photos[iid] = photo
            self._iid_to_path[iid] = item.path
        if batch.progress is not None:
            self.progress["value"] = batch.progress

    def _on_images_loaded(self, failed_files: tuple[str, ...]) -> None:
        self.progress.pack_forget()
        for message in self.gallery.summary_messages(failed_files):
            self.grid.insert("", tk.END, text=message)

    def _selected_path(self) -> Path | None:
        selection = self.grid.selection()
        if not selection:
            return None
        return self._iid_to_path.get(selection[0])

    def _on_selection_changed(self, _event: tk.Event) -> None:
        if not self.grid.selection():
            texts = describe_selection(None)
        else:
            path = self._selected_path()
            if path is None:
                return
            texts = describe_selection(path)
        for label, text in zip((self.path_label, self.time_label, self.size_label), texts):
            label.configure(text=text)

    def _on_double_click(self, event: tk.Event) -> None:
        iid = self.grid.identify_row(event.y)
        path = self._iid_to_path.get(iid)
        if path is None:
            return
        dialog = PreviewDialog(self.root, path, self._on_image_saved, self._on_image_deleted)
        self.root.wait_window(dialog.window)

    def _iid_for_path(self, path: Path) -> str | None:
        return next((iid for iid, p in self._iid_to_path.items() if p == path), None)

    def _on_image_saved(self, path: Path) -> None:
        iid = self._iid_for_path(path)
        if iid is None:
            return
        try:
            with Image.open(path) as picture:
                picture.load()
                thumbnail = make_thumbnail(picture, THUMBNAIL_SIZE)
        except (OSError, ValueError):
            return
        self.gallery.update_thumbnail(path, thumbnail)
        photo = ImageTk.PhotoImage(thumbnail)
        self._photos[iid] = photo
        self.grid.item(iid, image=photo)

    def _on_image_deleted(self, path: Path) -> None:
        iid = self._iid_for_path(path)
        if iid is None:
            return
        self.gallery.remove_path(path)
        self.grid.delete(iid)
        del self._iid_to_path[iid]
        self._photos.pop(iid, None)


def main(argv: list[str] | None = None) -> int:
    """Open the album window and run until it is closed."""
    parser = argparse.ArgumentParser(prog="imagealbum", description="Browse and edit photos.")
    parser.parse_args(argv)
    root = tk.Tk()
    MainWindow(root)
    root.mainloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())