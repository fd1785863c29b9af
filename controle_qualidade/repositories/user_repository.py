"""Repository for User entities."""
from typing import Optional
import uuid

from controle_qualidade.models_db import User


class UserRepository:
    def __init__(self, session):
        self._session = session

    def get_by_id(self, id: uuid.UUID) -> Optional[User]:
        return self._session.get(User, id)
