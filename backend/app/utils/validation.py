# app/utils/validation.py
from typing import Dict, List
from pydantic import ValidationError


def flatten_errors(exc: ValidationError) -> dict:
    """
    Aplatis les erreurs pydantic en {formErrors, fieldErrors}, la forme
    renvoyée au formulaire côté client.
    """
    form_errors: List[str] = []
    field_errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        if loc:
            field_errors.setdefault(str(loc[0]), []).append(err["msg"])
        else:
            form_errors.append(err["msg"])
    return {"formErrors": form_errors, "fieldErrors": field_errors}
