from __future__ import annotations

from dataclasses import dataclass


class ConfigurationError(RuntimeError):
    def __init__(self, missing: list[str] | tuple[str, ...], reason: str = "missing required settings"):
        self.missing = list(missing)
        super().__init__(f"{reason}: {', '.join(self.missing)}")


class DatabaseConnectionError(RuntimeError):
    def __init__(self, url: str, attempts: int, cause: BaseException | None = None):
        self.url = url
        self.attempts = attempts
        super().__init__(f"could not connect to {url} after {attempts} attempt(s): {cause}")


class CacheError(RuntimeError):
    pass


@dataclass(eq=False)
class AppServiceError(Exception):
    status_code: int
    detail: str
