# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""Start the BookNote server on localhost and open it in a browser tab."""

import os
import sys
import time
import threading
import webbrowser
import uvicorn
from booknote.main import create_app


def open_browser(port):
    """Wait a moment for the server to start, then open the browser."""
    time.sleep(1.5)
    webbrowser.open(f"http://127.0.0.1:{port}")


def main():
    # Folders the local backend and the storage dump write into
    os.makedirs("data/logs", exist_ok=True)
    os.makedirs("resources/config", exist_ok=True)

    port = 8000

    if "--no-browser" not in sys.argv:
        threading.Thread(target=open_browser, args=(port,), daemon=True).start()

    app = create_app()
    uvicorn.run(app, host="127.0.0.1", port=port, log_level="info")


if __name__ == "__main__":
    main()
