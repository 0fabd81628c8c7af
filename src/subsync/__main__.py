import uvicorn

from subsync.core.config import settings


def main() -> None:
    uvicorn.run(
        "subsync.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
