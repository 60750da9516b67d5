import click
from flask import Flask, jsonify, current_app
from flask_migrate import Migrate

from config import Config
from routes import dashboard_bp, auth_bp, slots_bp, booking_bp, settings_bp, users_bp, audit_bp
from models import db
from utils.auth_context import load_principal
from utils.errors import ParkingError, StoreFailure
from security.csrf import csrf_protect


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Register routes
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(slots_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(audit_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.before_request
    def _load_principal():
        load_principal()

    # runs after _load_principal so it knows whether the caller is authenticated
    app.before_request(csrf_protect)

    @app.errorhandler(ParkingError)
    def _parking_error(err):
        if not isinstance(err, StoreFailure):
            current_app.logger.info("%s: %s", err.__class__.__name__, err.message)
        return jsonify(error=err.message), err.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------
from models.user import User, UserRole
from security.rbac import ROLES
from utils.audit import log_event
from utils.seed import seed_slots


def register_cli(app):
    @app.cli.command("set-role")
    @click.argument("email")
    @click.argument("role", type=click.Choice(ROLES))
    def set_role(email, role):
        """Set a user's role by email (use this to bootstrap the first admin)."""
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            raise click.ClickException("User not found")

        old_role = user.role
        if user.role_binding is None:
            user.role_binding = UserRole(role=role)
        else:
            user.role_binding.role = role
        db.session.commit()

        log_event("CLI_SET_ROLE", target=user, old=old_role, new=role)
        click.echo(f"{user.email} is now {role}")

    @app.cli.command("seed-slots")
    @click.option("--zones", default=None, help="Zone letters, e.g. ABC")
    @click.option("--per-zone", type=int, default=None, help="Slots to create per zone")
    @click.option("--price", default=None, help="Hourly rate for new slots")
    def seed_slots_command(zones, per_zone, price):
        """Create the default slot grid (existing slot numbers are skipped)."""
        try:
            created = seed_slots(zones=zones, per_zone=per_zone, price=price)
        except ParkingError as err:
            raise click.ClickException(err.message) from err
        click.echo(f"Created {created} slot(s)")

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
