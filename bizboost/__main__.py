from __future__ import annotations

import os

import uvicorn


def main() -> None:
    # Bound to loopback: the desktop shell is the only client.
    uvicorn.run(
        "bizboost.main:app",
        host=os.getenv("BIZBOOST_HOST", "127.0.0.1"),
        port=int(os.getenv("BIZBOOST_PORT", "8765")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
