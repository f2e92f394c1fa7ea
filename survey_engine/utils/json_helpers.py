"""JSON Serialization Helpers - Handle NaN, inf, numpy and pydantic values"""
import math
from typing import Any

import numpy as np
from pydantic import BaseModel


def sanitize_for_json(obj: Any) -> Any:
    """
    Recursively sanitize a view payload to be JSON-compliant.
    Replaces NaN, inf, and -inf with None and unwraps numpy scalars and models.
    """
    if isinstance(obj, BaseModel):
        return sanitize_for_json(obj.model_dump())
    if isinstance(obj, np.generic):
        obj = obj.item()
    if isinstance(obj, bool) or obj is None:
        return obj
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return obj
    elif isinstance(obj, dict):
        return {str(key): sanitize_for_json(value) for key, value in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [sanitize_for_json(item) for item in obj]
    elif isinstance(obj, (int, str)):
        return obj
    else:
        # For other types (like enums), convert to string
        return str(obj)
