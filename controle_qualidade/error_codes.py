"""
Sistema de Códigos de Erro Estruturados
Fornece mensagens padronizadas para usuários e administradores
"""
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from controle_qualidade.domain.exceptions import (
    AuthenticationRequiredError, BusinessRuleViolationError, DependencyFailureError,
    InvalidStatusTransitionError, NotFoundError, ValidationError,
)


class ErrorCode:
    """Catálogo de códigos de erro com mensagens para usuário final e administrador"""

    # Validação (1xxx)
    ERR_1001 = {
        "code": "ERR_1001",
        "admin_msg": "Campo obrigatório ausente ou inválido",
        "user_msg": "Verifique os campos destacados e tente novamente."
    }

    ERR_1002 = {
        "code": "ERR_1002",
        "admin_msg": "Resultado final (disposition) desconhecido",
        "user_msg": "Escolha um resultado final válido: Aprovado, Aprovado com Restrições ou Reprovado."
    }

    ERR_1003 = {
        "code": "ERR_1003",
        "admin_msg": "Severidade de não conformidade desconhecida",
        "user_msg": "Escolha uma gravidade válida: Baixa, Média, Alta ou Crítica."
    }

    # Identidade (2xxx)
    ERR_2001 = {
        "code": "ERR_2001",
        "admin_msg": "Operação que registra autor chamada sem usuário autenticado",
        "user_msg": "Sua sessão expirou. Faça login novamente para continuar."
    }

    # Registros (3xxx)
    ERR_3001 = {
        "code": "ERR_3001",
        "admin_msg": "Registro referenciado não existe",
        "user_msg": "O registro solicitado não foi encontrado. Ele pode ter sido removido."
    }

    ERR_3002 = {
        "code": "ERR_3002",
        "admin_msg": "Transição de status inválida (inspeção já concluída com outro resultado)",
        "user_msg": "Esta inspeção já foi concluída com outro resultado. Solicite uma correção ao gestor."
    }

    ERR_3003 = {
        "code": "ERR_3003",
        "admin_msg": "Regra de negócio violada",
        "user_msg": "A operação não é permitida no estado atual do registro."
    }

    # Banco de Dados / Armazenamento (4xxx)
    ERR_4001 = {
        "code": "ERR_4001",
        "admin_msg": "Conexão com banco de dados perdida",
        "user_msg": "Serviço temporariamente indisponível. Tente novamente em alguns instantes."
    }

    ERR_4002 = {
        "code": "ERR_4002",
        "admin_msg": "Violação de integridade (registro duplicado ou referenciado)",
        "user_msg": "O registro já existe ou está em uso por outro registro."
    }

    ERR_4003 = {
        "code": "ERR_4003",
        "admin_msg": "Falha no armazenamento de fotos",
        "user_msg": "Não foi possível enviar as fotos. A inspeção foi salva; tente anexá-las novamente."
    }

    ERR_4004 = {
        "code": "ERR_4004",
        "admin_msg": "Falha ao gravar registros no banco (commit failed)",
        "user_msg": "Erro ao salvar os dados. Nada foi gravado; tente novamente."
    }

    # Sistema / Genérico (9xxx)
    ERR_9001 = {
        "code": "ERR_9001",
        "admin_msg": "Erro desconhecido",
        "user_msg": "Ocorreu um erro inesperado. Tente novamente ou contate o suporte."
    }

    @staticmethod
    def get_error(exception_or_code):
        """
        Retorna objeto de erro baseado na exceção ou código.

        Args:
            exception_or_code: Exception object ou string com código (ex: "ERR_1001")

        Returns:
            dict com code, admin_msg, user_msg
        """
        if isinstance(exception_or_code, str):
            # Código direto
            return getattr(ErrorCode, exception_or_code, ErrorCode.ERR_9001)

        exc = exception_or_code

        # Exceções de domínio
        if isinstance(exc, ValidationError):
            if exc.field == "disposition":
                return ErrorCode.ERR_1002
            if exc.field == "severity":
                return ErrorCode.ERR_1003
            return ErrorCode.ERR_1001
        if isinstance(exc, AuthenticationRequiredError):
            return ErrorCode.ERR_2001
        if isinstance(exc, NotFoundError):
            return ErrorCode.ERR_3001
        if isinstance(exc, InvalidStatusTransitionError):
            return ErrorCode.ERR_3002
        if isinstance(exc, BusinessRuleViolationError):
            return ErrorCode.ERR_3003
        if isinstance(exc, DependencyFailureError):
            if "fotos" in exc.dependency:
                return ErrorCode.ERR_4003
            return ErrorCode.ERR_4004

        # Banco de dados
        if isinstance(exc, IntegrityError):
            return ErrorCode.ERR_4002
        if isinstance(exc, OperationalError):
            return ErrorCode.ERR_4001
        if isinstance(exc, SQLAlchemyError):
            return ErrorCode.ERR_4004

        # Análise da mensagem
        error_str = str(exc).lower()
        if "database" in error_str or "connection" in error_str:
            return ErrorCode.ERR_4001
        if "duplicate" in error_str or "unique constraint" in error_str:
            return ErrorCode.ERR_4002
        if "storage" in error_str or "upload" in error_str:
            return ErrorCode.ERR_4003

        # Default
        return ErrorCode.ERR_9001


HTTP_STATUS = (
    (ValidationError, 400),
    (AuthenticationRequiredError, 401),
    (NotFoundError, 404),
    (BusinessRuleViolationError, 409),
    (DependencyFailureError, 503),
)


def http_status_for(exc) -> int:
    """HTTP status used by the API for a domain error (500 when unmapped)."""
    for exc_type, status in HTTP_STATUS:
        if isinstance(exc, exc_type):
            return status
    return 500
