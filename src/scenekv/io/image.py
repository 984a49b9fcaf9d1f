from __future__ import annotations

import base64
from io import BytesIO
from typing import Any

import numpy as np
from PIL import Image


_MIME_TO_FORMAT: dict[str, str] = {
    "image/png": "PNG",
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/webp": "WEBP",
}


def _normalize_mime_type(mime_type: str | None) -> str:
    mime = str(mime_type or "image/png").strip().lower()
    if mime not in _MIME_TO_FORMAT:
        raise ValueError(f"Unsupported mime_type {mime!r}. Supported: {sorted(_MIME_TO_FORMAT.keys())}")
    return mime


def _coerce_u8_image(arr: np.ndarray) -> np.ndarray:
    a = np.asarray(arr)
    if a.ndim not in (2, 3):
        raise ValueError(f"image array must have shape (H,W) or (H,W,C), got {a.shape}")
    if a.ndim == 3 and a.shape[2] not in (1, 3, 4):
        raise ValueError(f"image array channel count must be 1, 3, or 4; got {a.shape[2]}")
    if np.issubdtype(a.dtype, np.floating):
        a = np.clip(a, 0.0, 1.0) * 255.0
    else:
        a = np.clip(a, 0, 255)
    return np.ascontiguousarray(a, dtype=np.uint8)


def encode_image_payload(
    image: np.ndarray,
    *,
    mime_type: str | None = "image/png",
    color_order: str = "rgb",
) -> tuple[bytes, str, int, int, int]:
    """Encode a color image (H,W), (H,W,1), (H,W,3) or (H,W,4).

    Float images are taken to be in [0, 1]. Returns
    `(data, mime_type, width, height, channels)`.
    """
    mime = _normalize_mime_type(mime_type)
    order = str(color_order).lower()
    if order not in {"bgr", "rgb"}:
        raise ValueError("color_order must be 'bgr' or 'rgb'")

    arr_u8 = _coerce_u8_image(image)
    height = int(arr_u8.shape[0])
    width = int(arr_u8.shape[1])
    channels = int(arr_u8.shape[2]) if arr_u8.ndim == 3 else 1

    out = arr_u8
    if channels == 1:
        mode = "L"
        out = arr_u8.reshape(height, width)
    elif channels == 3:
        mode = "RGB"
        if order == "bgr":
            out = arr_u8[:, :, ::-1]
    else:
        mode = "RGBA"
        if order == "bgr":
            out = arr_u8[:, :, [2, 1, 0, 3]]

    img = Image.fromarray(np.ascontiguousarray(out)).convert(mode)
    buf = BytesIO()
    img.save(buf, format=_MIME_TO_FORMAT[mime])
    return bytes(buf.getvalue()), mime, width, height, channels


def encode_depth_payload(depth: np.ndarray, *, scale: float = 1000.0) -> tuple[bytes, int, int]:
    """Encode a metric depth map as a 16-bit PNG of `depth * scale` (millimeters by default).

    Non-finite and negative depths become 0, which the viewer treats as "no return".
    """
    d = np.asarray(depth, dtype=np.float64)
    if d.ndim == 3 and d.shape[2] == 1:
        d = d[:, :, 0]
    if d.ndim != 2:
        raise ValueError(f"depth must have shape (H,W), got {d.shape}")
    if not np.isfinite(scale) or scale <= 0:
        raise ValueError("scale must be a positive finite number")
    scaled = np.where(np.isfinite(d) & (d > 0.0), d * float(scale), 0.0)
    u16 = np.ascontiguousarray(np.clip(np.rint(scaled), 0, 65535), dtype=np.uint16)
    img = Image.fromarray(u16)
    buf = BytesIO()
    img.save(buf, format="PNG")
    return bytes(buf.getvalue()), int(d.shape[1]), int(d.shape[0])


def image_document(
    data: bytes,
    *,
    mime_type: str,
    width: int,
    height: int,
    channels: int,
    depth_scale: float | None = None,
) -> dict[str, Any]:
    """JSON document stored under a camera image key."""
    doc: dict[str, Any] = {
        "mimeType": mime_type,
        "width": int(width),
        "height": int(height),
        "channels": int(channels),
        "data": base64.b64encode(data).decode("ascii"),
    }
    if depth_scale is not None:
        doc["depthScale"] = float(depth_scale)
    return doc


def decode_image_document(doc: dict[str, Any]) -> np.ndarray:
    """Decode an image document back into an array (uint8 color or uint16 depth)."""
    raw = base64.b64decode(str(doc["data"]))
    with Image.open(BytesIO(raw)) as img:
        return np.asarray(img)
