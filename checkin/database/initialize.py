# initialize.py
from checkin.database.session import Base, engine
from checkin.models import AttendanceRecord, Event  # noqa: F401  registers the tables


# Create the database tables
def create_tables(bind=engine):
    Base.metadata.create_all(bind=bind)


if __name__ == "__main__":
    create_tables()
    print("Tables created successfully")
