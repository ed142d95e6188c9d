from __future__ import annotations

import pytest

from fwupload.config import Settings
from fwupload.services.credentials import open_credential_store


class FakeTokens:
    def __init__(self, token: str | None = None):
        self.token = token

    def get(self) -> str | None:
        return self.token


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        api_base_url="https://api.test",
        database_url=f"sqlite:///{tmp_path / 'creds.db'}",
        transfer_chunk_size=4,
    )


@pytest.fixture
def store(settings):
    return open_credential_store(settings)
