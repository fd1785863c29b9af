import logging
import uuid

from flask_login import LoginManager, current_user

from controle_qualidade.database import get_db
from controle_qualidade.repositories.user_repository import UserRepository

login_manager = LoginManager()

auth_logger = logging.getLogger("controle-qualidade.auth")


@login_manager.user_loader
def load_user(user_id):
    try:
        db = next(get_db())
        if db is None:
            return None
        return UserRepository(db).get_by_id(uuid.UUID(str(user_id)))
    except ValueError:
        auth_logger.warning(f"ID de usuário inválido na sessão: {user_id}")
        return None


@login_manager.unauthorized_handler
def unauthorized():
    from flask import jsonify
    return jsonify({'code': 'AUTHENTICATION_REQUIRED', 'message': 'Usuário não autenticado'}), 401


def get_current_user_id():
    """Id of the logged-in user, or None outside an authenticated request."""
    if current_user and current_user.is_authenticated:
        return current_user.id
    return None
