"""Run the HR Portal access service: python3 -m hrportal"""

import uvicorn

from hrportal.config import settings


def main() -> None:
    uvicorn.run("hrportal.api.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
