from __future__ import annotations

from .image import decode_image_document, encode_depth_payload, encode_image_payload, image_document

__all__ = [
    "encode_image_payload",
    "encode_depth_payload",
    "image_document",
    "decode_image_document",
]
