#!/usr/bin/env python3
"""Start the API with uvicorn, honouring the PORT environment variable."""

import logging
import os
import sys

import uvicorn


def main() -> int:
    port = os.environ.get("PORT", "8000")
    try:
        port_int = int(port)
    except ValueError:
        logging.warning(f"Invalid PORT value '{port}', using default 8000")
        port_int = 8000

    uvicorn.run(
        "src.tourplan.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=port_int,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
