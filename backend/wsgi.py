# backend/wsgi.py
from stockdesk import create_app

app = create_app()
