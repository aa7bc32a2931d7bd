from app import models as _models  # noqa: F401 - register SQLAlchemy models before create_all
from app.bootstrap import seed_catalog
from app.db import Base, SessionLocal, engine
from app.utils.demo_seed import DEMO_EMAIL, DEMO_PASSWORD, seed_demo


def main():
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        seed_catalog(db)
        result = seed_demo(db)
    print(f"Seeded demo user #{result['userId']}: {result['risks']} risks, {result['controls']} controls")
    print(f"Login: {DEMO_EMAIL} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
