"""
Data shapes exchanged with the evaluation service.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pearflag.errors import ResponseFormatError


@dataclass
class User:
    """User the flags are evaluated for."""

    id: str
    email: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id}
        if self.email is not None:
            data["email"] = self.email
        return data


@dataclass
class EvaluationRequest:
    """
    Request sent to the evaluation endpoints.

    ``flag`` is required by ``evaluate_flag`` and ignored by ``evaluate_flags``.
    """

    environment: str
    user: Optional[User]
    flag: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON body, omitting unset fields."""
        data: Dict[str, Any] = {"environment": self.environment}
        if self.user is not None:
            data["user"] = self.user.to_dict()
        if self.flag is not None:
            data["flag"] = self.flag
        return data


@dataclass
class FlagEvaluation:
    """Evaluated state of one flag."""

    flag: str
    enabled: bool

    @classmethod
    def from_dict(cls, data: Any) -> "FlagEvaluation":
        """
        Build from a decoded JSON object.

        Raises:
            ResponseFormatError: If the payload is not a flag evaluation
        """
        if not isinstance(data, dict):
            raise ResponseFormatError(f"Expected a flag evaluation object, got {type(data).__name__}")

        flag = data.get("flag")
        enabled = data.get("enabled")
        if not isinstance(flag, str) or not isinstance(enabled, bool):
            raise ResponseFormatError(f"Malformed flag evaluation: {data!r}")

        return cls(flag=flag, enabled=enabled)


def parse_evaluations(data: Any) -> List[FlagEvaluation]:
    """Build the ordered result of a multi-flag evaluation."""
    if not isinstance(data, list):
        raise ResponseFormatError(f"Expected a list of flag evaluations, got {type(data).__name__}")
    return [FlagEvaluation.from_dict(item) for item in data]
