from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate
from datetime import datetime
from config import (
    SQLALCHEMY_DATABASE_URI,
    SQLALCHEMY_TRACK_MODIFICATIONS,
    SECRET_KEY,
    TOKEN_EXPIRY_DAYS,
    LOG_LEVEL,
    CORS_ORIGINS,
)
from models import db
import logging
import os

migrate = Migrate()


def create_app(test_config=None, register_blueprints: bool = True):
    """
    Application factory.

    ``test_config`` overrides the values read from config.py, applied before
    the database is bound so tests can point at their own SQLite file.
    """
    app = Flask(__name__)

    # Avoid 308 redirects on /api/employees vs /api/employees/ during preflight
    app.url_map.strict_slashes = False

    CORS(app,
         origins=CORS_ORIGINS,
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
         allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept", "Origin"],
         supports_credentials=True,
         # Payslip and register downloads carry their filename here
         expose_headers=["Content-Disposition"],
         max_age=86400)

    app.config.update(
        SQLALCHEMY_DATABASE_URI=SQLALCHEMY_DATABASE_URI,
        SQLALCHEMY_TRACK_MODIFICATIONS=SQLALCHEMY_TRACK_MODIFICATIONS,
        SECRET_KEY=SECRET_KEY,
        TOKEN_EXPIRY_DAYS=TOKEN_EXPIRY_DAYS,
    )
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )

    db.init_app(app)
    migrate.init_app(app, db)

    if register_blueprints:
        from routes.auth import auth_bp
        from routes.employees import employees_bp
        from routes.attendance import attendance_bp
        from routes.salary import salary_bp
        from routes.payroll import payroll_bp

        app.register_blueprint(auth_bp, url_prefix="/api/auth")
        app.register_blueprint(employees_bp, url_prefix="/api/employees")
        app.register_blueprint(attendance_bp, url_prefix="/api/attendance")
        app.register_blueprint(salary_bp, url_prefix="/api/salary")
        app.register_blueprint(payroll_bp, url_prefix="/api/payroll")

    @app.route("/")
    def home():
        return {
            "message": "Employee Payroll API",
            "version": "1.0",
            "status": "running",
            "endpoints": {
                "auth": "/api/auth",
                "employees": "/api/employees",
                "attendance": "/api/attendance",
                "salary": "/api/salary",
                "payroll": "/api/payroll"
            }
        }

    @app.route("/health")
    def health_check():
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}

    return app


# gunicorn imports app:app; scripts and tests set CREATE_APP_ON_IMPORT=0
if os.getenv("CREATE_APP_ON_IMPORT", "1") not in ("0", "false", "False"):
    app = create_app()

if __name__ == "__main__":
    if "app" not in globals():
        app = create_app()
    app.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 5000)),
        debug=os.environ.get("FLASK_ENV") != "production"
    )
