from __future__ import annotations

from typing import cast

import orjson
from lzstring import LZString  # type: ignore[import-untyped]

from domain.models import ExcalidrawDocument


def encode_scene_payload(document: ExcalidrawDocument) -> str:
    payload = orjson.dumps(document.to_dict()).decode("utf-8")
    return cast(str, LZString().compressToEncodedURIComponent(payload))


def build_excalidraw_url(base_url: str, document: ExcalidrawDocument) -> str:
    clean_base = base_url.split("#", 1)[0]
    return f"{clean_base}#json={encode_scene_payload(document)}"
