# Overview: WSGI entry point (FLASK_APP=wsgi.py).

from cafe_pos import create_app

app = create_app()

if __name__ == "__main__":
    app.run(port=5000)
