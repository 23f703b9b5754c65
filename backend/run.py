from times_tables import create_app, socketio

app = create_app()

if __name__ == '__main__':
    try:
        # SocketIO server also runs the session sweeper in the background
        socketio.run(app, debug=True)
    finally:
        app.extensions['times_tables'].store.stop_sweeper()
