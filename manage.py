#!/usr/bin/env python3
"""
Trackbox CLI — Admin management commands.

Usage:
    python manage.py reset-admin

Reads TRACKBOX_ADMIN_EMAIL and TRACKBOX_ADMIN_PASSWORD from env vars (or .env file).
If the user exists, resets their password and ensures the admin role.
If the user does not exist, creates a new admin account.
"""

import os
import sys

from dotenv import load_dotenv


def reset_admin():
    """Reset or create the admin account from env vars."""
    load_dotenv()

    email = os.getenv('TRACKBOX_ADMIN_EMAIL')
    password = os.getenv('TRACKBOX_ADMIN_PASSWORD')
    name = os.getenv('TRACKBOX_ADMIN_NAME', 'Admin')

    if not email or not password:
        print("TRACKBOX_ADMIN_EMAIL and TRACKBOX_ADMIN_PASSWORD must be set.")
        print("Set them in your environment or .env file and retry.")
        sys.exit(1)

    email = email.strip()

    from config import config
    if len(password) < config.PASSWORD_MIN_LENGTH:
        print(f"TRACKBOX_ADMIN_PASSWORD must be at least {config.PASSWORD_MIN_LENGTH} characters.")
        sys.exit(1)

    from app import create_app
    app = create_app()

    with app.app_context():
        from app.models import db, User

        user = User.query.filter_by(email=email).first()

        if user:
            user.set_password(password)
            user.role = 'admin'
            db.session.commit()
            print(f"Password reset and admin role ensured for {email}")
        else:
            user = User(name=name, email=email, role='admin')
            user.set_password(password)
            db.session.add(user)
            db.session.commit()
            print(f"Admin account created for {email}")


def main():
    if len(sys.argv) < 2:
        print("Usage: python manage.py <command>")
        print("Commands:")
        print("  reset-admin   Reset or create admin account from env vars")
        sys.exit(1)

    command = sys.argv[1]

    if command == 'reset-admin':
        reset_admin()
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == '__main__':
    main()
