"""Load the demo clinic (doctors, patients, procedures, today's bookings) into a file-backed store.

Usage: CLINIC_DATABASE_PATH=instance/clinic.db python scripts/seed_clinic_data.py
"""
import sys
from pathlib import Path

current_dir = Path(__file__).parent.parent
sys.path.append(str(current_dir))

from clinicdesk.adapters.sqlite.core import get_db
from clinicdesk.app import create_app
from clinicdesk.config.settings import Config, settings_from_object
from clinicdesk.services.auth_service import AuthService
from clinicdesk.services.seed import seed_demo_data


def seed():
    settings = settings_from_object(Config)
    settings['SEED_DEMO_DATA'] = False
    if settings['DATABASE_PATH'] == ':memory:':
        print("CLINIC_DATABASE_PATH is not set; an in-memory store would be lost on exit.")
        return

    app = create_app(settings)
    with app.app_context():
        print("Creating users...")
        auth = AuthService()
        auth.register_user("reception1", "rec123", "RECEPTION", "Front Desk")

        if seed_demo_data(get_db(), app.config):
            print("Seeding completed successfully.")
        else:
            print("Doctors already exist; nothing to seed.")


if __name__ == "__main__":
    seed()
