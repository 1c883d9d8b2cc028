#!/usr/bin/env python3
"""
Create the schema and the first admin account.

    ADMIN_EMAIL=admin@company.com ADMIN_PASSWORD=... python init_db.py
"""

import os
import sys

os.environ.setdefault("CREATE_APP_ON_IMPORT", "0")

from app import create_app
from models import db
from models.user import User
from services.employee_service import create_admin_user
from utils.exceptions import HRMSError


def init_database(admin_email, admin_password):
    app = create_app(register_blueprints=False)

    with app.app_context():
        print("Creating database tables...")
        db.create_all()
        print("✅ Database tables created successfully!")

        if User.query.filter_by(role="admin").first():
            print("⚠️  Admin account already exists. Skipping seed.")
            return

        try:
            user, _ = create_admin_user(
                {"name": "Master Admin", "email": admin_email, "password": admin_password, "role": "admin"},
                created_by="system"
            )
        except HRMSError as e:
            print(f"❌ Could not create admin: {e.message}")
            sys.exit(1)

        print("✅ Master Admin created successfully!")
        print(f"🆔 Admin ID: {user.login_id}")
        print(f"📧 Email: {user.email}")


if __name__ == "__main__":
    email = os.getenv("ADMIN_EMAIL", "admin@company.com")
    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        print("Set ADMIN_PASSWORD before running this script")
        sys.exit(1)
    init_database(email, password)
