import os
import re
from typing import Any, Dict, Optional
from bson import ObjectId
from fastapi import Request, status
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")

templates = Jinja2Templates(directory=TEMPLATES_DIR)

# ObjectId hex form only, the 12-byte form is never accepted from a URL
OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")

FAILURE_STATUS = status.HTTP_400_BAD_REQUEST

def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Returns the ObjectId for a 24-char hex string, None if the id is malformed"""
    if not isinstance(value, str) or not OBJECT_ID_PATTERN.fullmatch(value):
        return None
    return ObjectId(value)

def serialize_doc(doc):
    doc["id"] = str(doc["_id"])
    del doc["_id"]
    return doc

def render_page(request: Request, name: str, context: Optional[Dict[str, Any]] = None, status_code: int = status.HTTP_200_OK):
    """Renders a full HTML page from the templates directory"""
    return templates.TemplateResponse(request, name, context or {}, status_code=status_code)
