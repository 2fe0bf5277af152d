import os

import uvicorn


def main() -> None:
    host = os.getenv("CAFE_FINDER_HOST", "0.0.0.0")
    port = int(os.getenv("CAFE_FINDER_PORT", "8000"))
    uvicorn.run("cafe_finder.main:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
