# api/server.py
from __future__ import annotations

import logging
import os
import secrets
import tempfile
from pathlib import Path
from typing import List

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response

from frameblend import (
    BlendError,
    DecodeFailed,
    Policy,
    UnsupportedPixelFormat,
    blend_files,
)
from frameblend.raster import encode, is_image_extension

logger = logging.getLogger(__name__)

app = FastAPI(title="Image Blender API", version="1.0.0")

# Limits and validation
MIN_FILES = 1
MAX_FILES = 15
MAX_FILE_MB = 4
MAX_FILE_BYTES = MAX_FILE_MB * 1024 * 1024
# any extension Pillow can read is accepted alongside these media types
ACCEPTED_MEDIA_TYPES = {"image/png", "image/jpeg", "image/webp", "image/tiff", "image/bmp"}


def _sanitize_filename(name: str) -> str:
    base = os.path.basename(name or "")
    stem, ext = os.path.splitext(base)
    ext = ext.lower() if is_image_extension(base) else ".png"
    safe_stem = "".join(
        ch if ch.isalnum() or ch in ("-", "_") else "_" for ch in stem
    )[:40]
    token = secrets.token_hex(4)
    return f"{safe_stem or 'img'}_{token}{ext}"


async def _save_upload(upload: UploadFile, dest: Path) -> None:
    total = 0
    dest.parent.mkdir(parents=True, exist_ok=True)
    with dest.open("wb") as f_out:
        while True:
            chunk = await upload.read(1024 * 1024)
            if not chunk:
                break
            total += len(chunk)
            if total > MAX_FILE_BYTES:
                raise HTTPException(
                    status_code=413,
                    detail=(
                        f"File '{upload.filename}' exceeds {MAX_FILE_MB} MB limit."
                    ),
                )
            f_out.write(chunk)


def _status_for(exc: BlendError) -> int:
    if isinstance(exc, (UnsupportedPixelFormat, DecodeFailed)):
        return 415
    return 422


@app.get("/")
def health():
    return {"status": "ok"}


@app.post("/")
async def blend_endpoint(
    files: List[UploadFile] = File(...),
    mode: str = Form("sum"),
    min_from_first: bool = Form(False),
) -> Response:
    if not files or len(files) < MIN_FILES or len(files) > MAX_FILES:
        raise HTTPException(
            status_code=422,
            detail=f"Please upload between {MIN_FILES} and {MAX_FILES} images.",
        )

    try:
        policy = Policy.parse(mode)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    for uf in files:
        content_type = (uf.content_type or "").lower()
        ext_ok = is_image_extension(uf.filename or "")
        if content_type not in ACCEPTED_MEDIA_TYPES and not ext_ok:
            raise HTTPException(
                status_code=415,
                detail="Only image uploads are allowed.",
            )

    try:
        with tempfile.TemporaryDirectory(prefix="blend_") as td:
            temp_dir = Path(td)
            file_paths: List[Path] = []
            names = {}

            for uf in files:
                safe_name = _sanitize_filename(uf.filename or "image.png")
                dest = temp_dir / safe_name
                await _save_upload(uf, dest)
                file_paths.append(dest)
                names[dest] = uf.filename or safe_name

            try:
                result = blend_files(file_paths, policy, min_from_first=min_from_first)
            except BlendError as exc:
                # report the client's file name rather than the temp path
                detail = str(exc)
                if exc.path is not None and exc.path in names:
                    detail = detail.replace(str(exc.path), names[exc.path])
                raise HTTPException(status_code=_status_for(exc), detail=detail)

            headers = {}
            if result.alpha_discarded:
                headers["X-Alpha-Discarded"] = ",".join(
                    names[p] for p in result.alpha_discarded
                )
            data = encode(result.pixels, "PNG")
            return Response(content=data, media_type="image/png", headers=headers)
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("Blending failed")
        return JSONResponse(
            status_code=500, content={"detail": f"Blending failed: {str(exc)}"}
        )
