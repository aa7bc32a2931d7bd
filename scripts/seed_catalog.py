from app import models as _models  # noqa: F401 - register SQLAlchemy models before create_all
from app.bootstrap import seed_catalog
from app.db import Base, SessionLocal, engine


def main():
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        created = seed_catalog(db)
    print("Catalog seeded: " + ", ".join(f"{key}={value} new" for key, value in created.items()))


if __name__ == "__main__":
    main()
