from sphereplay.app import create_app
from sphereplay.models.database import db

def init_db():
    app = create_app()
    with app.app_context():
        db.create_all()
        print("Database tables created successfully")

if __name__ == '__main__':
    init_db()
