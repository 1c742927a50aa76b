#!/usr/bin/env python3
"""
Database initialization script.

Creates all tables, the first admin account and a default level ladder.
Safe to run repeatedly: existing rows are left alone.

    ADMIN_NAME=admin ADMIN_PASSWORD=... python init_database.py
"""

import os
import sys

from app import create_app
from errors import Conflict, InvalidInput
from models import Level, User, ROLE_ADMIN
from services import catalog

DEFAULT_LEVELS = [
    ('Novice', 0),
    ('Apprentice', 100),
    ('Adept', 250),
    ('Scholar', 500),
    ('Master of Logic', 1000),
]


def seed_admin(name, password):
    """Create the admin account unless one already exists."""
    if User.query.filter_by(role=ROLE_ADMIN).first():
        print("Admin account already exists")
        return None
    try:
        admin = catalog.create_admin(name, password)
    except (Conflict, InvalidInput) as e:
        print(f"Could not create admin '{name}': {e.message}")
        return None
    print(f"Admin '{admin.name}' created")
    return admin


def seed_levels(levels=DEFAULT_LEVELS):
    """Insert the default ladder when the level table is empty."""
    if Level.query.first():
        print("Levels already present, skipping default ladder")
        return []
    created = [catalog.create_level(name, xp_required) for name, xp_required in levels]
    print(f"Created {len(created)} default levels")
    return created


def init_database(app=None):
    app = app or create_app()
    with app.app_context():
        password = os.environ.get('ADMIN_PASSWORD')
        if password:
            seed_admin(os.environ.get('ADMIN_NAME', 'admin'), password)
        else:
            print("ADMIN_PASSWORD not set, skipping admin account")
        seed_levels()
    return True


if __name__ == '__main__':
    sys.exit(0 if init_database() else 1)
