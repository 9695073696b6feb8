from roomportal import create_app, db
from roomportal.models import User, Room

app = create_app()

with app.app_context():
    db.create_all()

    # Create Admin
    if not User.query.filter_by(email='admin@workspace.com').first():
        admin = User(
            name='Admin',
            email='admin@workspace.com',
            phone_number='9000000000',
            employee_id='EMP-0001',
            role='admin'
        )
        db.session.add(admin)
        print("Admin created (admin@workspace.com / 9000000000)")

    # Create Rooms
    rooms_data = [
        {"name": "Board Room", "capacity": 12, "location": "Floor 3", "no_of_chairs": 12, "has_tv": True, "has_board": True},
        {"name": "Huddle 1", "capacity": 4, "location": "Floor 2", "no_of_chairs": 4, "has_monitor": True},
        {"name": "Huddle 2", "capacity": 4, "location": "Floor 2", "no_of_chairs": 4, "is_working": False},
        {"name": "Training Hall", "capacity": 40, "location": "Ground", "no_of_chairs": 40, "has_tv": True, "has_board": True}
    ]

    for r_data in rooms_data:
        if not Room.query.filter_by(name=r_data['name']).first():
            room = Room(**r_data)
            db.session.add(room)
            print(f"Room {room.name} created.")

    db.session.commit()
    print("Database seeded successfully.")
