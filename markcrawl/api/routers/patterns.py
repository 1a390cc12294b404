from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from markcrawl.services.pattern_matcher import validate_pattern


class ValidatePatternRequest(BaseModel):
    pattern: Optional[str] = None


def create_patterns_router():
    router = APIRouter(prefix="/api", tags=["Patterns"])

    @router.post("/validate-regex")
    def validate_regex(req: ValidatePatternRequest):
        if not req.pattern:
            raise HTTPException(status_code=400, detail="pattern is required")
        valid, error = validate_pattern(req.pattern)
        if valid:
            return {"valid": True}
        return {"valid": False, "error": error}

    return router
