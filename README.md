# imagealbum

A small desktop photo album. Pick a drive, and imagealbum walks it (up to four
levels below the drive root), collects every picture that is at least
400 × 400 pixels, and shows each one as a thumbnail that fits in a 100 × 100
square. Folders that start with `C:/Windows`, `C:/Program Files`,
`C:/Program Files (x86)`, `C:/System Volume Information` or `C:/$Recycle.Bin`
are skipped.

Selecting a thumbnail shows its path, creation time and pixel size.
Double-clicking opens a preview window where the picture can be tuned with
sliders (−100 to 100) for brightness, contrast, saturation, exposure, clarity,
colour temperature and sharpening. The result can be saved over the original
or saved under a new name (the dialog offers PNG, JPEG and BMP). The file can
also be deleted after a confirmation. The grid follows what you do: a saved
picture gets a new thumbnail, and a deleted one leaves the grid.

## Installing

```
pip install .
```

The window is built with Tkinter, which ships with most Python installations.

## Running

```
imagealbum
```

`imagealbum --help` prints the usage line. The command takes no other options.

On Windows the drive list shows every drive letter that exists and opens on
`C:` when it is there, otherwise on the first drive. On other systems the list
holds only `/`. Scanning runs in a background thread with a progress bar. When
it finishes, the grid says so if no large enough images were found, and lists
any files that could not be decoded.

## Using the pieces from Python

The scanning and editing code does not need the window.

Scan a folder with `imagealbum.scanner.ImageScanner`. Its arguments are the
root, the maximum depth, the thumbnail size and an optional
`threading.Event` that cancels the scan:

```python
from imagealbum.scanner import ImageScanner

scanner = ImageScanner("/home/me/Pictures", 4, 100, None)
print("entries to visit:", scanner.count())
for batch in scanner.scan():
    print(batch.directory, len(batch.images), batch.failed, batch.progress)
```

`scan()` yields `ScanBatch` objects that carry `FoundImage` entries (a path and
a Pillow thumbnail), the names of files that failed to load, and progress
percentages. The last batch always reports 100. The module also provides
`image_name_patterns`, `is_system_dir`, `validate_image_size` and
`make_thumbnail`.

Adjust and save a picture with `imagealbum.preview.PreviewSession`:

```python
from imagealbum.preview import PreviewSession

session = PreviewSession("/home/me/Pictures/beach.jpg")
session.set_adjustment("brightness", 20)
session.set_adjustment("saturation", 30)
session.save_as("/home/me/Pictures/beach-bright.png")
```

`render()` returns the adjusted NumPy array. `preview((width, height))`
returns a Pillow image scaled to fit the given box. `save()` overwrites the
original file, and `delete()` removes it. Failures raise `PreviewError`.
`GeometryTracker` and `Rect` in the same module keep track of the window size
to restore after the window has been maximized.

The image operations live in `imagealbum.adjust`: `adjust_brightness_contrast`,
`adjust_exposure`, `adjust_saturation`, `adjust_temperature`, `adjust_clarity`,
`sharpen`, `gaussian_blur`, `rgb_to_hsv` and `hsv_to_rgb`. Each one works on
`(height, width, 3)` `uint8` RGB arrays. `apply_adjustments` runs the whole
pipeline from an `Adjustments` dataclass.

`imagealbum.gallery` holds the thumbnail grid model (`Gallery`,
`GalleryItem`) along with `describe_selection`, `list_drives` and
`pick_default_drive`.

## What it does not do

- It only scans whole drives from the drive list. There is no way to choose an
  arbitrary folder in the window.
- The interface text is in Chinese only. There are no translations.

## Tests

```
pip install .[test]
pytest
```