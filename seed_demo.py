"""
Seed a demo manager, site and roster for local use.

Creates the manager account if needed, then a demo site open 08:00-20:00 on
weekdays with two veterans, two novices and a manager (Victor mentors Noah).
Running it again adds another demo site for the same manager.

Usage: python seed_demo.py
       DEMO_EMAIL=me@example.com DEMO_PASSWORD=secret123 python seed_demo.py
"""

import os

from app import create_app
from models import db, User
import db_service


def seed_demo(email, username, password):
    """Create (or reuse) the demo manager and give them a demo site."""
    user = User.query.filter_by(email=email.lower()).first()
    if user is None:
        user = User(email=email.lower(), username=username, first_name='Demo', last_name='Manager')
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        print(f"Created manager {user.email}")
    else:
        print(f"Using existing manager {user.email}")

    site = db_service.seed_demo_site(user)
    print(f"Demo site {site.name} created with id {site.id}")
    return site


if __name__ == '__main__':
    app = create_app()
    with app.app_context():
        seed_demo(
            os.environ.get('DEMO_EMAIL', 'demo@example.com'),
            os.environ.get('DEMO_USERNAME', 'demo'),
            os.environ.get('DEMO_PASSWORD', 'demo-password')
        )
