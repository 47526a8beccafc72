from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from homepick.config import settings

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if "sqlite" in settings.database_url else {},
    echo=False,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=None):
    """Create all database tables."""
    # Register models on Base.metadata before create_all
    import homepick.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def flush_db():
    """Delete all listings and news articles. Use for starting fresh with tests."""
    from homepick.models import Listing, NewsArticle

    init_db()  # Ensure tables exist (creates them if database is new)
    db = SessionLocal()
    try:
        db.query(Listing).delete()
        db.query(NewsArticle).delete()
        db.commit()
    finally:
        db.close()
