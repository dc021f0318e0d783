# Copyright (C) 2024 StageDesk Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Request body parsing for endpoints that take JSON or multipart form data.

Multipart bodies come from dashboard forms that carry an optional ``image``
file next to the record fields. Nested values travel as JSON strings:
``social_media`` as an object and ``artists`` as a list of ids (a repeated
field or a comma-separated string also works for ``artists``). Empty form
fields are treated as absent; send ``artists=[]`` to clear a line-up.
"""

import json
import logging
from typing import Any, TypeVar

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from starlette.datastructures import FormData, UploadFile

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

IMAGE_FIELD = "image"
JSON_OBJECT_FIELDS = ("social_media",)
LIST_FIELDS = ("artists",)


def _is_form(content_type: str) -> bool:
    return content_type.startswith("multipart/form-data") or content_type.startswith(
        "application/x-www-form-urlencoded"
    )


def _parse_list(values: list[str]) -> Any:
    values = [v.strip() for v in values if v.strip()]
    if len(values) == 1:
        single = values[0]
        if single.startswith("["):
            try:
                return json.loads(single)
            except json.JSONDecodeError:
                logger.warning("Could not parse list field as JSON: %r", single)
                return single
        return [part.strip() for part in single.split(",") if part.strip()]
    return values


def form_to_dict(form: FormData) -> tuple[dict[str, Any], UploadFile | None]:
    """Flatten form data into a dict for model validation, splitting off the image upload."""
    raw: dict[str, Any] = {}
    image: UploadFile | None = None
    for key in form.keys():
        values = form.getlist(key)
        if key == IMAGE_FIELD:
            for value in values:
                if isinstance(value, UploadFile) and value.filename:
                    image = value
            continue
        texts = [v for v in values if isinstance(v, str)]
        if key in LIST_FIELDS:
            if any(t.strip() for t in texts):
                raw[key] = _parse_list(texts)
            continue
        if not texts or texts[-1].strip() == "":
            continue
        value = texts[-1]
        if key in JSON_OBJECT_FIELDS:
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                logger.warning("Could not parse %s as JSON: %r", key, value)
        raw[key] = value
    return raw, image


async def read_payload(request: Request, model: type[ModelT]) -> tuple[ModelT, UploadFile | None]:
    """Validate the request body against ``model``. Returns (data, image upload or None)."""
    content_type = request.headers.get("content-type", "").lower()
    image = None
    if _is_form(content_type):
        form = await request.form()
        raw, image = form_to_dict(form)
    else:
        try:
            raw = await request.json()
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be valid JSON")
        if not isinstance(raw, dict):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be a JSON object")
    try:
        return model.model_validate(raw), image
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e
