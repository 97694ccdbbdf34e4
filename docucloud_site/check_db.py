"""Database connectivity check: python -m docucloud_site.check_db"""

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings
from .database import create_db_engine, create_session_factory
from .models import Event, Inquiry, PageView, VisitorSession

TABLES = [
    ("inquiries", Inquiry),
    ("visitor_sessions", VisitorSession),
    ("page_views", PageView),
    ("events", Event),
]


def check_database(session_factory):
    """Return {table: row count} and {table: error message} for each tracked table."""
    counts, errors = {}, {}
    db = session_factory()
    try:
        for name, model in TABLES:
            try:
                counts[name] = db.execute(select(func.count()).select_from(model)).scalar_one()
            except SQLAlchemyError as e:
                db.rollback()
                errors[name] = str(e).splitlines()[0]
    finally:
        db.close()
    return counts, errors


def main():
    settings = Settings()
    engine = create_db_engine(settings.database_url)
    print(f"Testing database connection: {engine.url.render_as_string(hide_password=True)}")
    print("-" * 80)

    counts, errors = check_database(create_session_factory(engine))
    for name, _ in TABLES:
        if name in counts:
            print(f"{name:<20} | OK      | {counts[name]} rows")
        else:
            print(f"{name:<20} | ERROR   | {errors[name]}")

    print("-" * 80)
    if errors:
        print("Some tables are not accessible. Has the schema been created? Start the app once to create it.")
        return 1
    print("Database connection OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
