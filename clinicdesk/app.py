import os
import sys
import webbrowser

import click
from flask import Flask, jsonify

from clinicdesk.adapters.sqlite.core import get_db, init_app, init_db_command
from clinicdesk.common.errors import AuthFailure, ClinicError, NotFound, SchedulingConflict, ValidationError
from clinicdesk.config.settings import Config

ERROR_STATUS = {
    ValidationError: 400,
    AuthFailure: 401,
    NotFound: 404,
    SchedulingConflict: 409,
}


def create_app(test_config=None):
    """
    Build the Flask application.

    `test_config` is a mapping that replaces `Config`; tests pass the
    attributes of `TestConfig` so every app gets its own in-memory store.
    """
    app = Flask(__name__)

    # --------- Configuration ---------
    if test_config is None:
        app.config.from_object(Config)
    else:
        app.config.from_mapping(test_config)

    if not app.config.get('TESTING', False):
        env_name = os.environ.get('FLASK_ENV') or os.environ.get('APP_ENV') or 'development'
        if str(env_name).lower() == 'production':
            app.config['DEBUG'] = False
        print(f"[startup] Using database: {app.config['DATABASE_PATH']}")

    # --------- Store and startup data ---------
    from clinicdesk.services.auth_service import AuthService
    from clinicdesk.services.seed import seed_demo_data, seed_reference_data

    db = init_app(app)
    AuthService(db, app.config).ensure_admin()
    seed_reference_data(db)
    if app.config.get('SEED_DEMO_DATA'):
        seed_demo_data(db, app.config)

    # --------- CLI commands ---------
    @app.cli.command("init-db")
    def init_db():
        init_db_command()
        AuthService(get_db(), app.config).ensure_admin()
        seed_reference_data(get_db())

    @app.cli.command("seed-demo")
    def seed_demo():
        if seed_demo_data(get_db(), app.config):
            print("Demo data loaded.")
        else:
            print("Doctors already exist; demo data skipped.")

    @app.cli.command("create-user")
    @click.argument("username")
    @click.argument("password")
    @click.argument("role", default="RECEPTION")
    @click.option("--full-name", default=None)
    @click.option("--recovery-phone", default=None)
    def create_user(username, password, role, full_name, recovery_phone):
        service = AuthService()
        try:
            created = service.register_user(username, password, role.upper(), full_name, recovery_phone)
        except ValidationError as e:
            raise click.ClickException(e.message)
        if created:
            print(f"User {username} created successfully.")
        else:
            print(f"User {username} already exists.")

    # --------- Errors ---------
    @app.errorhandler(ClinicError)
    def handle_clinic_error(error):
        status = next((code for cls, code in ERROR_STATUS.items() if isinstance(error, cls)), 400)
        return jsonify({"error": error.message, "kind": error.kind}), status

    # --------- Blueprints ---------
    from clinicdesk.api.auth import bp as auth_bp
    app.register_blueprint(auth_bp)

    from clinicdesk.api.patients import bp as patients_bp
    app.register_blueprint(patients_bp)

    from clinicdesk.api.doctors import bp as doctors_bp
    app.register_blueprint(doctors_bp)

    from clinicdesk.api.appointments import bp as appointments_bp
    app.register_blueprint(appointments_bp)

    from clinicdesk.api.clinical import bp as clinical_bp
    app.register_blueprint(clinical_bp)

    from clinicdesk.api.billing import bp as billing_bp
    app.register_blueprint(billing_bp)

    from clinicdesk.api.dashboard import bp as dashboard_bp
    app.register_blueprint(dashboard_bp)

    @app.route("/")
    def index():
        from flask import g

        return jsonify({"service": "clinicdesk", "user": g.user})

    return app


def open_browser(port=8080):
    """Open the local address in the default browser."""
    url = f"http://127.0.0.1:{port}/"
    try:
        webbrowser.open(url)
    except webbrowser.Error:
        pass


if __name__ == "__main__":
    application = create_app()
    is_frozen = bool(getattr(sys, 'frozen', False))

    port = int(os.environ.get('PORT', 8080))
    application.run(
        debug=application.config.get('DEBUG', False) and not is_frozen,
        host="0.0.0.0",
        port=port,
        use_reloader=False,
    )
