#!/usr/bin/env python
"""
ClinicClock - Database Management CLI

Usage:
    python -m scripts.db_manage check       # Test database connection
    python -m scripts.db_manage init        # Create missing tables directly
    python -m scripts.db_manage migrate     # Run pending migrations
    python -m scripts.db_manage current     # Show current migration version
    python -m scripts.db_manage history     # Show migration history
    python -m scripts.db_manage seed        # Add employees and admin accounts
    python -m scripts.db_manage setpassword # Set password for an admin
"""

import sys
from getpass import getpass

from clinicclock.config import get_settings
from clinicclock.database import check_connection, get_db_context, init_db


settings = get_settings()


def cmd_check():
    """Test database connection."""
    print(f"Connecting to: {settings.database_url}")
    try:
        check_connection()
        print("Connection successful!")
        return True
    except Exception as e:
        print(f"Connection failed: {e}")
        return False


def cmd_init():
    """Create any missing tables without Alembic."""
    init_db()
    print("Tables created.")
    return True


def cmd_migrate():
    """Run pending Alembic migrations."""
    from alembic.config import Config
    from alembic import command
    
    print("Running migrations...")
    alembic_cfg = Config("alembic.ini")
    command.upgrade(alembic_cfg, "head")
    print("Migrations complete!")
    return True


def cmd_current():
    """Show current migration version."""
    from alembic.config import Config
    from alembic import command
    
    alembic_cfg = Config("alembic.ini")
    command.current(alembic_cfg)
    return True


def cmd_history():
    """Show migration history."""
    from alembic.config import Config
    from alembic import command
    
    alembic_cfg = Config("alembic.ini")
    command.history(alembic_cfg)
    return True


def read_new_password():
    password = getpass("Password: ")
    confirm = getpass("Confirm password: ")
    
    if password != confirm:
        print("Passwords do not match")
        return None
    
    # Check byte length for bcrypt (72 byte limit)
    if len(password.encode("utf-8")) > 72:
        print("Password is too long. Bcrypt has a 72-byte limit.")
        return None
    
    return password


def cmd_seed():
    """Add employees (default password) and admin accounts interactively."""
    from clinicclock.services.admin import AdminService
    
    with get_db_context() as db:
        service = AdminService(db)
        
        print("Employee names, one per line. Empty line to finish.")
        while True:
            name = input("Employee: ").strip()
            if not name:
                break
            service.add_employee(name)
        
        print("Admin usernames, one per line. Empty line to finish.")
        while True:
            username = input("Admin username: ").strip()
            if not username:
                break
            password = read_new_password()
            if password is None:
                continue
            service.create_admin(username, password)
    
    print("Seed complete!")
    return True


def cmd_setpassword():
    """Set password for an admin account."""
    from clinicclock.services.admin import AdminService
    
    username = input("Admin username: ").strip()
    if not username:
        print("Username required")
        return False
    
    password = read_new_password()
    if password is None:
        return False
    
    with get_db_context() as db:
        try:
            AdminService(db).set_admin_password(username, password)
        except ValueError as e:
            print(e)
            return False
    
    print(f"Password updated for {username}")
    return True


def cmd_help():
    """Show help."""
    print(__doc__)
    return True


COMMANDS = {
    "check": cmd_check,
    "init": cmd_init,
    "migrate": cmd_migrate,
    "current": cmd_current,
    "history": cmd_history,
    "seed": cmd_seed,
    "setpassword": cmd_setpassword,
    "help": cmd_help,
}


def main():
    if len(sys.argv) < 2:
        cmd_help()
        sys.exit(1)
    
    command = sys.argv[1].lower()
    
    if command not in COMMANDS:
        print(f"Unknown command: {command}")
        cmd_help()
        sys.exit(1)
    
    success = COMMANDS[command]()
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
