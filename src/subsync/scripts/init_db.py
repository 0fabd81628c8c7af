from subsync.db.init_db import create_all


def main() -> None:
    create_all()
    print("✅ DB tables created")


if __name__ == "__main__":
    main()
