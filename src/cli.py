import argparse

from loguru import logger
from sqlalchemy import create_engine

from src.config import get_settings
from src.db.database import Base

settings = get_settings()


def init_database():
    """Create all tables."""
    import src.models  # noqa: F401

    engine = create_engine(settings.sync_database_url)
    Base.metadata.create_all(engine)
    logger.info("Database initialized")


def run_tick():
    """Run a single bump tick right now."""
    from src.scheduler.jobs import run_bump_tick

    init_database()
    result = run_bump_tick()
    logger.info(f"Result: {result}")


def main():
    parser = argparse.ArgumentParser(description="Auto Connect bump promotion CLI")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init command
    subparsers.add_parser("init", help="Initialize database")

    # tick command
    subparsers.add_parser("tick", help="Advance due bump schedules once")

    # serve command
    subparsers.add_parser("serve", help="Start API server")

    # seed command
    subparsers.add_parser("seed", help="Seed sample vehicle ads")

    args = parser.parse_args()

    if args.command == "init":
        init_database()
    elif args.command == "tick":
        run_tick()
    elif args.command == "serve":
        import uvicorn

        uvicorn.run(
            "src.main:app",
            host=settings.api_host,
            port=settings.api_port,
            reload=settings.debug,
        )
    elif args.command == "seed":
        from src.db.seed import seed_ads

        seed_ads()
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
