try:
    from backend.phrasecounter.server import create_app
except ImportError:  # pragma: no cover
    from phrasecounter.server import create_app

app, socketio = create_app()
