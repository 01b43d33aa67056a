#!/usr/bin/env python3
"""
Admin User Manager Script
=========================

Maintenance script for calendar accounts, for use on the server when nobody
can reach the admin panel (first deploy, lost admin password).

Usage:
    python admin_user_manager.py list
    python admin_user_manager.py create <email> <password> <role> [name]
    python admin_user_manager.py reset-password <email> <new_password>
"""

import sys

from app import create_app
from models import ROLES, User
from error_handler import AppError
from services.users import list_users as all_users, create_user as create_account, set_password


def list_users():
    """List all users with basic info."""
    app = create_app()

    with app.app_context():
        users = all_users()
        if not users:
            print("No users found in the database.")
            return True

        print("=" * 80)
        print("USER LIST")
        print("=" * 80)
        for i, user in enumerate(users, 1):
            print(f"{i:2d}. ID: {user.id:3d} | Email: {user.email:30s} | Role: {user.role:7s} | Logins: {user.login_count}")
        print(f"\nTotal users: {len(users)}")
        return True


def reset_password(email, new_password):
    """Set a user's password directly."""
    app = create_app()

    with app.app_context():
        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            print(f"User '{email}' not found.")
            return False
        try:
            set_password(user, new_password)
        except AppError as e:
            print(f"Error resetting password: {e.message}")
            return False
        print(f"Password reset successfully for user '{user.email}'")
        return True


def create_user(email, password, role, name=None):
    """Create a new user with a known password (no setup email)."""
    app = create_app()

    with app.app_context():
        try:
            user = create_account(
                {'email': email, 'password': password, 'role': role, 'name': name},
                actor=None,
                send_email=False,
            )
        except AppError as e:
            print(f"Error creating user: {e.message}")
            return False
        print(f"User '{user.email}' created successfully with role '{user.role}'")
        return True


def show_help():
    """Show help information."""
    print(f"""
Admin User Manager Script
========================

Usage:
    python admin_user_manager.py <command> [arguments]

Commands:
    list                                  - List all users with basic info
    create <email> <pass> <role> [name]   - Create a new user (roles: {', '.join(ROLES)})
    reset-password <email> <pass>         - Reset a user's password
    help                                  - Show this help

Examples:
    python admin_user_manager.py list
    python admin_user_manager.py create admin@school.org s3cretpass admin "Front Office"
    python admin_user_manager.py reset-password admin@school.org newpassword123
""")


def main(argv=None):
    """Main function. Returns the process exit code."""
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        show_help()
        return 1

    command = argv[0].lower()

    if command == 'help':
        show_help()
        return 0
    if command == 'list':
        return 0 if list_users() else 1
    if command == 'reset-password':
        if len(argv) < 3:
            print("Usage: python admin_user_manager.py reset-password <email> <new_password>")
            return 1
        return 0 if reset_password(argv[1], argv[2]) else 1
    if command == 'create':
        if len(argv) < 4:
            print("Usage: python admin_user_manager.py create <email> <password> <role> [name]")
            return 1
        return 0 if create_user(argv[1], argv[2], argv[3], argv[4] if len(argv) > 4 else None) else 1

    print(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == '__main__':
    sys.exit(main())
