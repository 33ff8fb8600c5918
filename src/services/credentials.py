# src/services/credentials.py

import os
from abc import ABC, abstractmethod
from typing import Optional


class CredentialProvider(ABC):
    """Source of the session's bearer token. Read-only for API clients."""

    @abstractmethod
    def get_token(self) -> Optional[str]:
        ...


class StaticCredentialProvider(CredentialProvider):

    def __init__(self, token: Optional[str]):
        self._token = (token or "").strip() or None

    def get_token(self) -> Optional[str]:
        return self._token


class EnvCredentialProvider(CredentialProvider):
    """Reads the token from the environment on every call."""

    def __init__(self, var_name: str = "LOGISTICS_API_TOKEN"):
        self.var_name = var_name

    def get_token(self) -> Optional[str]:
        return os.getenv(self.var_name, "").strip() or None
