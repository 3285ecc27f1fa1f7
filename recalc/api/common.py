"""
Shared request types and the engine call wrapper.
"""

import logging
from typing import Annotated, Any, Callable, Dict, Optional

from fastapi import HTTPException
from pydantic import BaseModel, BeforeValidator

from recalc.calculations.inputs import to_float, to_int, to_optional_float

logger = logging.getLogger(__name__)

CALCULATION_FAILED = "Calculation failed - please check your inputs"


def to_optional_int(value: Any) -> Optional[int]:
    number = to_optional_float(value)
    return None if number is None else int(number)


# Form values: numbers, numeric strings or "" (treated as zero / unset)
LenientFloat = Annotated[float, BeforeValidator(to_float)]
LenientInt = Annotated[int, BeforeValidator(to_int)]
OptionalFloat = Annotated[Optional[float], BeforeValidator(to_optional_float)]
OptionalInt = Annotated[Optional[int], BeforeValidator(to_optional_int)]


def run_calculation(
    engine: Callable[[Any], Dict],
    record_type: type,
    payload: BaseModel,
    **overrides: Any,
) -> Dict:
    """
    Build the engine's input record from a request model and run it.

    ValueError from the engine becomes a 400 with its message; anything
    else is logged and reported as a 422 asking the caller to check inputs.
    """
    data = payload.model_dump()
    data.update(overrides)
    try:
        return engine(record_type(**data))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("%s failed for %s", engine.__name__, record_type.__name__)
        raise HTTPException(status_code=422, detail=CALCULATION_FAILED)
