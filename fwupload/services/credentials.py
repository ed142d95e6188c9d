from __future__ import annotations

import datetime as dt
import logging

from sqlalchemy.orm import Session, sessionmaker

from fwupload.config import Settings
from fwupload.db import get_engine, init_db, make_session_factory
from fwupload.models import StoredCredential


log = logging.getLogger(__name__)

TOKEN_KEY = "fm_token"


class CredentialStore:
    """
    Persists the session token across process restarts.
    At most one token per device: saving replaces whatever was there.
    """

    def __init__(self, session_factory: sessionmaker[Session], key: str = TOKEN_KEY):
        self._session_factory = session_factory
        self._key = key

    def save(self, token: str) -> None:
        token = str(token or "").strip()
        if not token:
            raise ValueError("Refusing to store an empty token")
        with self._session_factory() as db:
            row = db.query(StoredCredential).filter(StoredCredential.key == self._key).first()
            if row is None:
                db.add(StoredCredential(key=self._key, value=token))
            else:
                row.value = token
                row.updated_at = dt.datetime.now(dt.timezone.utc)
            db.commit()
        log.info("Session token stored")

    def get(self) -> str | None:
        with self._session_factory() as db:
            row = db.query(StoredCredential).filter(StoredCredential.key == self._key).first()
            return row.value if row else None

    def clear(self) -> None:
        with self._session_factory() as db:
            n = db.query(StoredCredential).filter(StoredCredential.key == self._key).delete()
            db.commit()
        if n:
            log.info("Session token cleared")


def open_credential_store(settings: Settings) -> CredentialStore:
    engine = get_engine(settings)
    init_db(engine)
    return CredentialStore(make_session_factory(engine))
