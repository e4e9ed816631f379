"""Photo album: scan drives for large images, browse thumbnails, and adjust, save or delete pictures."""

__version__ = "0.1.0"