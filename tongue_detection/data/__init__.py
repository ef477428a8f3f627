"""Image loading utilities."""

from .image_source import load_pixel_buffer, pixel_buffer_from_array, list_images

__all__ = [
    "load_pixel_buffer",
    "pixel_buffer_from_array",
    "list_images",
]
