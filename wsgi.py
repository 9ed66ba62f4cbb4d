"""WSGI entry point for Gunicorn."""
from pos_billing import create_app

app = create_app()

if __name__ == "__main__":
    app.run()
