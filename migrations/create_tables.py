import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from clubhub import create_app
from clubhub.extensions import db
import clubhub.models  # noqa: F401


def create_tables():
    app = create_app()
    with app.app_context():
        db.create_all()
        app.logger.info(f"Created tables: {sorted(db.metadata.tables.keys())}")

if __name__ == "__main__":
    create_tables()
