import json
import logging

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from controle_qualidade.config import config
from controle_qualidade import database
from controle_qualidade.domain.exceptions import DomainError
from controle_qualidade.error_codes import ErrorCode, http_status_for


# Configuração de Logs (JSON Estruturado para Cloud Logging)
class JsonFormatter(logging.Formatter):
    def format(self, record):
        json_log = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "timestamp": self.formatTime(record, self.datefmt),
            "logger": record.name,
            "module": record.module,
        }
        if hasattr(record, "props"):
            json_log.update(record.props)

        if record.exc_info:
            json_log["exception"] = self.formatException(record.exc_info)

        return json.dumps(json_log, ensure_ascii=False)


def configure_logging(level=None):
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level or config.LOG_LEVEL, handlers=[handler], force=True)


logger = logging.getLogger("controle-qualidade")


def create_app(database_url=None, storage_service=None, run_migrations_on_start=True):
    """
    Monta a aplicação: banco, migrações, Flask-Login, blueprints e tratamento de erros.
    """
    configure_logging()

    app = Flask(__name__, static_folder='static')
    app.config['SECRET_KEY'] = config.SECRET_KEY
    # Cloud Run Load Balancer Fix (HTTPS)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    # Inicializa Banco de Dados
    engine = database.init_db(database_url)
    if engine is None:
        logger.warning("⚠️ Aplicação iniciada sem banco de dados")
    elif run_migrations_on_start:
        from controle_qualidade.migration import run_migrations
        logger.info("🔄 Iniciando Migrações...")
        run_migrations(engine)

    # Serviço de fotos
    if storage_service is None:
        from controle_qualidade.services.storage_service import StorageService
        storage_service = StorageService()
    app.storage_service = storage_service

    # Inicializa Flask-Login
    from controle_qualidade.auth import login_manager
    login_manager.init_app(app)

    # Registra Blueprints
    from controle_qualidade.inspection_routes import inspection_bp
    from controle_qualidade.dashboard_routes import dashboard_bp
    from controle_qualidade.cron_routes import cron_bp

    app.register_blueprint(inspection_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(cron_bp)
    logger.info("✅ Blueprints Registrados: inspections, dashboard, cron")

    @app.errorhandler(DomainError)
    def handle_domain_error(e):
        status = http_status_for(e)
        error = ErrorCode.get_error(e)
        log = logger.warning if status < 500 else logger.error
        log(f"{error['code']} {e.code}: {e.message} ({error['admin_msg']})")
        return jsonify({
            'code': e.code,
            'error_code': error['code'],
            'message': e.message,
            'user_message': error['user_msg'],
        }), status

    @app.errorhandler(500)
    def handle_500(e):
        original = getattr(e, 'original_exception', None) or e
        error = ErrorCode.get_error(original)
        logger.error(f"💥 ERRO 500 DETECTADO: {error['admin_msg']}: {original}", exc_info=original)
        return jsonify({'code': error['code'], 'message': error['user_msg']}), 500

    from controle_qualidade.container import teardown_uow

    @app.teardown_appcontext
    def shutdown_session(exception=None):
        teardown_uow(exception)
        if database.db_session:
            database.db_session.remove()

    return app
