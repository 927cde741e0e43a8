import uvicorn

from cadence.core.config import settings


def main() -> None:
    uvicorn.run("cadence.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
