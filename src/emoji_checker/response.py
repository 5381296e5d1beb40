from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

TEXT_PLAIN = "text/plain"


@dataclass(frozen=True)
class DispatchResult:
    status_code: int = 200
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def empty(cls) -> "DispatchResult":
        return cls()

    @classmethod
    def text(cls, body: str, *, status_code: int = 200) -> "DispatchResult":
        return cls(status_code=status_code, body=body, headers={"Content-Type": TEXT_PLAIN})

    @classmethod
    def error(cls, status_code: int, message: str) -> "DispatchResult":
        return cls(status_code=status_code, body=message, headers={})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "statusCode": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
        }
