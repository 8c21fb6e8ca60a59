"""
Entry point for the Flask CLI:
    python manage.py run
    python manage.py purge-sessions
    python manage.py seed-demo
    flask db upgrade (with FLASK_APP=wsgi.py)
"""

from flask.cli import main

if __name__ == "__main__":
    main()
