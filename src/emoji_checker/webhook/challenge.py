from typing import Any, Mapping, Optional

from ..response import DispatchResult
from .errors import ParseError


def extract_challenge(payload: Mapping[str, Any]) -> Optional[str]:
    value = payload.get("challenge")
    if isinstance(value, str) and value:
        return value
    return None


def build_challenge_response(challenge: str) -> DispatchResult:
    if not challenge:
        raise ParseError("challenge is required")
    return DispatchResult.text(challenge)
