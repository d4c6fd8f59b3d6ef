"""
run.py
------
Development entry point: starts the Flask development server.

Usage:
    $ python run.py

The backend URL and other settings come from ``CARSHARE_*`` environment
variables or a ``.env`` file (see ``carshare_web/config.py``).
"""

from carshare_web import create_app

app = create_app()


if __name__ == "__main__":
    app.run(debug=True)
