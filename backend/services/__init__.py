"""Backend services."""

from services.image_resolver import (
    resolve_image,
    resolve_images,
    to_data_uri,
)

__all__ = [
    "resolve_image",
    "resolve_images",
    "to_data_uri",
]
