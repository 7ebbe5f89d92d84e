from bingo import create_app, socketio

app = create_app()

if __name__ == '__main__':
    port = app.config['PORT']
    app.logger.info(f"Server is running on http://localhost:{port}")
    socketio.run(app, host='0.0.0.0', port=port, allow_unsafe_werkzeug=True)
